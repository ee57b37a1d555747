"""Chat completion with output checks.

Sends a short conversation to ``/chat/completions`` and asks the API to
score the answer for factuality and toxicity.

Prerequisites:
- ``PREDICTIONGUARD_URL`` and ``PREDICTIONGUARD_API_KEY`` are set, either in
  the environment or in a ``.env`` file in the working directory.
- The client is installed, for example ``pip install -e .`` from the repo root.

Run:

    python examples/chat-completion/main.py
"""

from __future__ import annotations

import os
import sys

from pgclient_py import ChatRequest, ConfigurationError, PGClient, PGError, Role


def main() -> None:
    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    model = os.getenv("PG_CHAT_MODEL", "Hermes-2-Pro-Llama-3-8B")

    req = (
        ChatRequest(model=model, max_tokens=1000, temperature=0.1)
        .add_message(Role.SYSTEM, "You are a helpful assistant. Your model is hosted by Prediction Guard.")
        .add_message(Role.USER, "Where does Prediction Guard host its models?")
        .with_output(factuality=True, toxicity=True)
    )

    try:
        resp = client.chat_completions(req)
    except PGError as exc:
        sys.exit(f"chat completion failed: {exc}")

    print(resp.text)
    for choice in resp.choices:
        if choice.message.output:
            print(f"[checks] {choice.message.output}")


if __name__ == "__main__":
    main()
