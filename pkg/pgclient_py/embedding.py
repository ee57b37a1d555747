"""Models for the ``/embeddings``, ``/rerank`` and ``/tokenize`` endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

EMBEDDING_PATH = "/embeddings"
RERANK_PATH = "/rerank"
TOKENIZE_PATH = "/tokenize"


class Direction(str, Enum):
    RIGHT = "Right"
    LEFT = "Left"


@dataclass
class EmbeddingInput:
    """Text and/or a base64 encoded image to embed."""

    text: Optional[str] = None
    image: Optional[str] = None

    def __post_init__(self) -> None:
        if self.text is None and self.image is None:
            raise ValueError("embedding input needs text or an image")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.text is not None:
            payload["text"] = self.text
        if self.image is not None:
            payload["image"] = self.image
        return payload


@dataclass
class EmbeddingRequest:
    model: str
    input: List[EmbeddingInput] = field(default_factory=list)
    truncate: Optional[bool] = None
    truncate_direction: Optional[Direction] = None

    def add_input(self, text: Optional[str] = None, image: Optional[str] = None) -> "EmbeddingRequest":
        self.input.append(EmbeddingInput(text=text, image=image))
        return self

    def truncate_from(self, direction: Direction) -> "EmbeddingRequest":
        self.truncate = True
        self.truncate_direction = Direction(direction)
        return self

    def to_payload(self) -> Dict[str, Any]:
        if not self.input:
            raise ValueError("embedding request has no input")
        payload: Dict[str, Any] = {
            "model": self.model,
            "input": [it.to_payload() for it in self.input],
        }
        if self.truncate is not None:
            payload["truncate"] = self.truncate
        if self.truncate_direction is not None:
            payload["truncate_direction"] = Direction(self.truncate_direction).value
        return payload


@dataclass
class Embedding:
    index: int
    object: str
    embedding: List[float]
    status: str = ""


@dataclass
class EmbeddingResponse:
    id: str
    object: str
    created: int
    model: str
    data: List[Embedding] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "EmbeddingResponse":
        return EmbeddingResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=int(data.get("created") or 0),
            model=data.get("model", ""),
            data=[
                Embedding(
                    index=int(it.get("index", 0)),
                    object=it.get("object", ""),
                    embedding=[float(v) for v in it.get("embedding", []) or []],
                    status=it.get("status", ""),
                )
                for it in data.get("data", []) or []
            ],
        )


# --- /rerank --------------------------------------------------------------


@dataclass
class RerankRequest:
    model: str
    query: str
    documents: List[str]
    return_documents: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "query": self.query,
            "documents": list(self.documents),
            "return_documents": self.return_documents,
        }


@dataclass
class RerankResult:
    index: int
    relevance_score: float
    text: str = ""


@dataclass
class RerankResponse:
    id: str
    object: str
    created: int
    model: str
    results: List[RerankResult] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "RerankResponse":
        return RerankResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=int(data.get("created") or 0),
            model=data.get("model", ""),
            results=[
                RerankResult(
                    index=int(it.get("index", 0)),
                    relevance_score=float(it.get("relevance_score") or 0.0),
                    text=it.get("text", ""),
                )
                for it in data.get("results", []) or []
            ],
        )


# --- /tokenize ------------------------------------------------------------


@dataclass
class TokenizeRequest:
    model: str
    input: str

    def to_payload(self) -> Dict[str, Any]:
        return {"model": self.model, "input": self.input}


@dataclass
class Token:
    id: int
    start: int
    end: int
    text: str


@dataclass
class TokenizeResponse:
    id: str
    object: str
    created: int
    model: str
    tokens: List[Token] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "TokenizeResponse":
        return TokenizeResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=int(data.get("created") or 0),
            model=data.get("model", ""),
            tokens=[
                Token(
                    id=int(it.get("id", 0)),
                    start=int(it.get("start", 0)),
                    end=int(it.get("end", 0)),
                    text=it.get("text", ""),
                )
                for it in data.get("tokens", []) or []
            ],
        )
