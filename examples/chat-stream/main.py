"""Streaming chat completion.

Prints tokens as they arrive from ``/chat/completions`` with
``stream: true``. The stream is used as a context manager so the
connection is released even if the loop exits early.

Set ``PGCLIENT_LOG_LEVEL=DEBUG`` to see the client's own logging.

Run:

    python examples/chat-stream/main.py
"""

from __future__ import annotations

import logging
import os
import sys

from pgclient_py import (
    ChatRequest,
    ConfigurationError,
    DecodeError,
    PGClient,
    PGError,
    Role,
    StreamTruncatedError,
)


def main() -> None:
    logging.basicConfig(level=os.getenv("PGCLIENT_LOG_LEVEL", "WARNING").upper())

    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    model = os.getenv("PG_CHAT_MODEL", "Hermes-2-Pro-Llama-3-8B")
    req = (
        ChatRequest(model=model, max_tokens=300, temperature=0.1)
        .add_message(Role.USER, "Write a haiku about server-sent events.")
    )

    try:
        with client.chat_completions_stream(req) as stream:
            while True:
                try:
                    chunk = next(stream)
                except StopIteration:
                    break
                except DecodeError as exc:
                    # a single malformed event; the stream is still usable
                    print(f"\n[skipped event: {exc}]", file=sys.stderr)
                    continue
                print(chunk.text, end="", flush=True)
    except StreamTruncatedError as exc:
        sys.exit(f"\nstream cut short: {exc}")
    except PGError as exc:
        sys.exit(f"chat stream failed: {exc}")

    print()


if __name__ == "__main__":
    main()
