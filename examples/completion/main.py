"""Plain text completion, blocking and streamed.

Run:

    python examples/completion/main.py
"""

from __future__ import annotations

import os
import sys

from pgclient_py import CompletionRequest, ConfigurationError, PGClient, PGError


def main() -> None:
    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    req = CompletionRequest(
        model=os.getenv("PG_COMPLETION_MODEL", "Neural-Chat-7B"),
        prompt="Will I lose my hair?",
        max_tokens=100,
        temperature=0.1,
    )

    try:
        print("[completion]")
        print(client.completions(req).text)

        print("\n[stream]")
        with client.completions_stream(req) as stream:
            for chunk in stream:
                print(chunk.text, end="", flush=True)
        print()
    except PGError as exc:
        sys.exit(f"completion failed: {exc}")


if __name__ == "__main__":
    main()
