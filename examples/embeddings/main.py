"""Embeddings, rerank and tokenize.

Run:

    python examples/embeddings/main.py
"""

from __future__ import annotations

import os
import sys

from pgclient_py import (
    ConfigurationError,
    Direction,
    EmbeddingRequest,
    PGClient,
    PGError,
    RerankRequest,
    TokenizeRequest,
)


def main() -> None:
    try:
        client = PGClient.from_env()
    except ConfigurationError as exc:
        sys.exit(str(exc))

    try:
        emb = client.embeddings(
            EmbeddingRequest(model=os.getenv("PG_EMBEDDING_MODEL", "bridgetower-large-itm-mlm-itc"))
            .add_input(text="Skyline with a flying horse.")
            .truncate_from(Direction.RIGHT)
        )
        for item in emb.data:
            print(f"[embedding] index={item.index} dims={len(item.embedding)}")

        ranked = client.rerank(
            RerankRequest(
                model=os.getenv("PG_RERANK_MODEL", "bge-reranker-v2-m3"),
                query="What is Deep Learning?",
                documents=[
                    "Deep Learning is pizza.",
                    "Deep Learning is not pizza.",
                    "Deep Learning is a subset of machine learning.",
                ],
                return_documents=True,
            )
        )
        for result in ranked.results:
            print(f"[rerank] {result.relevance_score:.3f} {result.text}")

        tokens = client.tokenize(
            TokenizeRequest(model=os.getenv("PG_CHAT_MODEL", "Hermes-2-Pro-Llama-3-8B"), input="Tokenize this")
        )
        print("[tokenize] " + " | ".join(t.text for t in tokens.tokens))
    except PGError as exc:
        sys.exit(f"request failed: {exc}")


if __name__ == "__main__":
    main()
