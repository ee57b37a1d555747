"""Models for the ``/chat/completions`` endpoint, plain, vision and streamed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .checks import ReplaceMethod

CHAT_PATH = "/chat/completions"

IMAGE_URL_TYPE = "image_url"
TEXT_TYPE = "text"


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class InputChecks:
    """Checks the API runs on the prompt before it reaches the model."""

    block_prompt_injection: bool = False
    pii: Optional[str] = None
    pii_replace_method: Optional[ReplaceMethod] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"block_prompt_injection": self.block_prompt_injection}
        if self.pii is not None:
            payload["pii"] = self.pii
        if self.pii_replace_method is not None:
            payload["pii_replace_method"] = ReplaceMethod(self.pii_replace_method).value
        return payload


@dataclass
class OutputChecks:
    """Checks the API runs on the generated text."""

    factuality: bool = False
    toxicity: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {"factuality": self.factuality, "toxicity": self.toxicity}


@dataclass
class ContentPart:
    type: str
    text: Optional[str] = None
    image_url: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type}
        if self.text is not None:
            payload["text"] = self.text
        if self.image_url is not None:
            payload["image_url"] = {"url": self.image_url}
        return payload


@dataclass
class Message:
    role: Role
    content: Union[str, List[ContentPart]]

    def to_payload(self) -> Dict[str, Any]:
        if isinstance(self.content, str):
            content: Any = self.content
        else:
            content = [part.to_payload() for part in self.content]
        return {"role": self.role.value, "content": content}


@dataclass
class ChatRequest:
    """Request body for a chat completion.

    Messages are appended with :meth:`add_message`; the ``with_*`` helpers
    set the guardrail options. All helpers return the request so calls can
    be chained::

        req = (
            ChatRequest(model="Hermes-2-Pro-Llama-3-8B", max_tokens=1000)
            .add_message(Role.USER, "How do you feel about the world in general?")
            .with_output(factuality=True, toxicity=True)
        )
    """

    model: str
    messages: List[Message] = field(default_factory=list)
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    input: Optional[InputChecks] = None
    output: Optional[OutputChecks] = None
    stream: bool = False

    def add_message(
        self,
        role: Union[Role, str],
        content: str,
        image: Optional[str] = None,
    ) -> "ChatRequest":
        """Append a message.

        ``role`` must be one of ``system``, ``user`` or ``assistant``.
        Passing ``image`` (a URL or a ``data:image/...;base64,`` URI) turns
        the message into a vision message carrying the image and the text.
        """
        role = Role(role)
        if image is None:
            self.messages.append(Message(role=role, content=content))
        else:
            self.messages.append(
                Message(
                    role=role,
                    content=[
                        ContentPart(type=IMAGE_URL_TYPE, image_url=image),
                        ContentPart(type=TEXT_TYPE, text=content),
                    ],
                )
            )
        return self

    def with_input(
        self,
        block_prompt_injection: bool,
        pii: Optional[str] = None,
        pii_replace_method: Optional[ReplaceMethod] = None,
    ) -> "ChatRequest":
        self.input = InputChecks(
            block_prompt_injection=block_prompt_injection,
            pii=pii,
            pii_replace_method=None if pii_replace_method is None else ReplaceMethod(pii_replace_method),
        )
        return self

    def with_output(self, factuality: bool, toxicity: bool) -> "ChatRequest":
        self.output = OutputChecks(factuality=factuality, toxicity=toxicity)
        return self

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
        }
        put_sampling(payload, self.max_tokens, self.temperature, self.top_p, self.top_k)
        if self.input is not None:
            payload["input"] = self.input.to_payload()
        if self.output is not None:
            payload["output"] = self.output.to_payload()
        if self.stream:
            payload["stream"] = True
        return payload


def put_sampling(
    payload: Dict[str, Any],
    max_tokens: Optional[int],
    temperature: Optional[float],
    top_p: Optional[float],
    top_k: Optional[int],
) -> None:
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    if temperature is not None:
        payload["temperature"] = temperature
    if top_p is not None:
        payload["top_p"] = top_p
    if top_k is not None:
        payload["top_k"] = top_k


# --- responses ------------------------------------------------------------


@dataclass
class ChatMessage:
    role: str
    content: str
    output: Optional[str] = None


@dataclass
class ChatChoice:
    index: int
    message: ChatMessage
    status: str = ""


@dataclass
class ChatResponse:
    id: Optional[str]
    object: Optional[str]
    created: Optional[int]
    model: Optional[str]
    choices: List[ChatChoice] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ChatResponse":
        choices = []
        for it in data.get("choices", []) or []:
            msg = it.get("message") or {}
            choices.append(
                ChatChoice(
                    index=int(it.get("index", 0)),
                    message=ChatMessage(
                        role=msg.get("role", ""),
                        content=msg.get("content") or "",
                        output=msg.get("output"),
                    ),
                    status=it.get("status", ""),
                )
            )
        created = data.get("created")
        return ChatResponse(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else int(created),
            model=data.get("model"),
            choices=choices,
        )

    @property
    def text(self) -> str:
        return self.choices[0].message.content if self.choices else ""


@dataclass
class ChatChunkChoice:
    index: int
    delta: Optional[str] = None
    generated_text: Optional[str] = None
    logprobs: Optional[float] = None
    finish_reason: Optional[str] = None


@dataclass
class ChatChunk:
    """One event of a streamed chat completion."""

    id: Optional[str]
    object: Optional[str]
    created: Optional[int]
    model: Optional[str]
    choices: List[ChatChunkChoice] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ChatChunk":
        choices = []
        for it in data.get("choices", []) or []:
            delta = it.get("delta") or {}
            choices.append(
                ChatChunkChoice(
                    index=int(it.get("index", 0)),
                    delta=delta.get("content"),
                    generated_text=it.get("generated_text"),
                    logprobs=it.get("logprobs"),
                    finish_reason=it.get("finish_reason"),
                )
            )
        created = data.get("created")
        return ChatChunk(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else int(created),
            model=data.get("model"),
            choices=choices,
        )

    @property
    def text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].delta or ""
