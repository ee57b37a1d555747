"""Translate text between ISO 639-3 languages.

Run:

    python examples/translate/main.py
"""

from __future__ import annotations

import sys

from pgclient_py import ConfigurationError, Language, PGClient, PGError


def main() -> None:
    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    try:
        resp = client.translate_text(
            "The rain in Spain stays mainly in the plain",
            Language.ENGLISH,
            Language.SPANISH,
            use_third_party_engine=True,
        )
    except PGError as exc:
        sys.exit(f"translation failed: {exc}")

    print(f"best ({resp.best_translation_model}, {resp.best_score:.2f}): {resp.best_translation}")
    for t in resp.translations:
        print(f"  {t.model}: {t.translation} ({t.score:.2f})")


if __name__ == "__main__":
    main()
