"""List available models, optionally filtered by capability.

Run:

    python examples/models/main.py [capability]

where ``capability`` is one of chat-completion, chat-with-image,
completion, embedding, embedding-with-image or tokenize.
"""

from __future__ import annotations

import sys

from pgclient_py import ConfigurationError, PGClient, PGError


def main() -> None:
    capability = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    try:
        print(f"[health] {client.health()}")
        resp = client.models(capability)
    except PGError as exc:
        sys.exit(f"listing models failed: {exc}")

    for model in resp.data:
        print(f"{model.id:<40} ctx={model.max_context_length:<7} {model.description}")


if __name__ == "__main__":
    main()
