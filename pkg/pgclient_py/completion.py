"""Models for the ``/completions`` endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .chat import InputChecks, OutputChecks, put_sampling
from .checks import ReplaceMethod

COMPLETION_PATH = "/completions"


@dataclass
class CompletionRequest:
    model: str
    prompt: str
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    input: Optional[InputChecks] = None
    output: Optional[OutputChecks] = None
    stream: bool = False

    def with_input(
        self,
        block_prompt_injection: bool,
        pii: Optional[str] = None,
        pii_replace_method: Optional[ReplaceMethod] = None,
    ) -> "CompletionRequest":
        self.input = InputChecks(
            block_prompt_injection=block_prompt_injection,
            pii=pii,
            pii_replace_method=None if pii_replace_method is None else ReplaceMethod(pii_replace_method),
        )
        return self

    def with_output(self, factuality: bool, toxicity: bool) -> "CompletionRequest":
        self.output = OutputChecks(factuality=factuality, toxicity=toxicity)
        return self

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "prompt": self.prompt}
        put_sampling(payload, self.max_tokens, self.temperature, self.top_p, self.top_k)
        if self.input is not None:
            payload["input"] = self.input.to_payload()
        if self.output is not None:
            payload["output"] = self.output.to_payload()
        if self.stream:
            payload["stream"] = True
        return payload


@dataclass
class CompletionChoice:
    text: str
    index: int
    status: str = ""
    model: str = ""
    finish_reason: Optional[str] = None


@dataclass
class CompletionResponse:
    id: Optional[str]
    object: Optional[str]
    created: Optional[int]
    choices: List[CompletionChoice] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CompletionResponse":
        created = data.get("created")
        return CompletionResponse(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else int(created),
            choices=[_choice(it) for it in data.get("choices", []) or []],
        )

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""


@dataclass
class CompletionChunk:
    """One event of a streamed text completion."""

    id: Optional[str]
    object: Optional[str]
    created: Optional[int]
    model: Optional[str]
    choices: List[CompletionChoice] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CompletionChunk":
        created = data.get("created")
        return CompletionChunk(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else int(created),
            model=data.get("model"),
            choices=[_choice(it) for it in data.get("choices", []) or []],
        )

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""


def _choice(it: Mapping[str, Any]) -> CompletionChoice:
    return CompletionChoice(
        text=it.get("text") or "",
        index=int(it.get("index", 0)),
        status=it.get("status", ""),
        model=it.get("model", ""),
        finish_reason=it.get("finish_reason"),
    )
