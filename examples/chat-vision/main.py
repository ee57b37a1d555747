"""Chat with an image.

Downloads an image, base64-encodes it and sends it alongside a question to
a vision-capable chat model. The prompt is screened for PII and prompt
injection on the way in.

Run:

    python examples/chat-vision/main.py [image-url-or-path]
"""

from __future__ import annotations

import os
import sys

from pgclient_py import ChatRequest, ConfigurationError, PGClient, PGError, ReplaceMethod, Role, image

DEFAULT_IMAGE = "https://farm4.staticflickr.com/3300/3497460990_11dfb95dd1_z.jpg"


def main() -> None:
    source = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_IMAGE

    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    try:
        uri = image.data_uri(source)
    except (OSError, PGError) as exc:
        sys.exit(f"could not load image {source}: {exc}")

    req = (
        ChatRequest(model=os.getenv("PG_VISION_MODEL", "llava-1.5-7b-hf"), max_tokens=1000)
        .add_message(Role.USER, "What is in this image?", image=uri)
        .with_input(True, pii="replace", pii_replace_method=ReplaceMethod.RANDOM)
    )

    try:
        print(client.chat_completions(req).text)
    except PGError as exc:
        sys.exit(f"vision chat failed: {exc}")


if __name__ == "__main__":
    main()
