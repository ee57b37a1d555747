"""Models for the ``/models`` catalogue endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

MODELS_PATH = "/models"

# Capability names accepted by ``/models/{capability}``.
CAPABILITIES = (
    "chat-completion",
    "chat-with-image",
    "completion",
    "embedding",
    "embedding-with-image",
    "tokenize",
)


def models_path(capability: Optional[str] = None) -> str:
    if not capability:
        return MODELS_PATH
    return f"{MODELS_PATH}/{capability}"


@dataclass
class ModelCapabilities:
    chat_completion: bool = False
    chat_with_image: bool = False
    completion: bool = False
    embedding: bool = False
    embedding_with_image: bool = False
    tokenize: bool = False


@dataclass
class ModelData:
    id: str
    object: str = ""
    created: str = ""
    owned_by: str = ""
    description: str = ""
    max_context_length: int = 0
    prompt_format: str = ""
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)


@dataclass
class ModelsResponse:
    object: str
    data: List[ModelData] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ModelsResponse":
        models = []
        for it in data.get("data", []) or []:
            caps = it.get("capabilities") or {}
            models.append(
                ModelData(
                    id=it.get("id", ""),
                    object=it.get("object", ""),
                    created=str(it.get("created", "")),
                    owned_by=it.get("owned_by", ""),
                    description=it.get("description", ""),
                    max_context_length=int(it.get("max_context_length") or 0),
                    prompt_format=it.get("prompt_format", ""),
                    capabilities=ModelCapabilities(
                        chat_completion=bool(caps.get("chat_completion", False)),
                        chat_with_image=bool(caps.get("chat_with_image", False)),
                        completion=bool(caps.get("completion", False)),
                        embedding=bool(caps.get("embedding", False)),
                        embedding_with_image=bool(caps.get("embedding_with_image", False)),
                        tokenize=bool(caps.get("tokenize", False)),
                    ),
                )
            )
        return ModelsResponse(object=data.get("object", ""), data=models)

    @property
    def ids(self) -> List[str]:
        return [m.id for m in self.data]
