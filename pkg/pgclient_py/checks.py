"""Models for the guardrail endpoints: factuality, injection, PII, toxicity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

FACTUALITY_PATH = "/factuality"
INJECTION_PATH = "/injection"
PII_PATH = "/PII"
TOXICITY_PATH = "/toxicity"


class ReplaceMethod(str, Enum):
    """How PII found in a prompt is replaced."""

    RANDOM = "random"
    MASK = "mask"
    CATEGORY = "category"
    FAKE = "fake"


# --- /factuality ----------------------------------------------------------


@dataclass
class FactualityRequest:
    reference: str
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"reference": self.reference, "text": self.text}


@dataclass
class FactualityCheck:
    score: float
    index: int
    status: str = ""


@dataclass
class FactualityResponse:
    id: str
    object: str
    created: int
    checks: List[FactualityCheck] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "FactualityResponse":
        return FactualityResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=int(data.get("created") or 0),
            checks=[
                FactualityCheck(
                    score=float(it.get("score", 0.0)),
                    index=int(it.get("index", 0)),
                    status=it.get("status", ""),
                )
                for it in data.get("checks", []) or []
            ],
        )


# --- /injection -----------------------------------------------------------


@dataclass
class InjectionRequest:
    prompt: str
    detect: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {"prompt": self.prompt, "detect": self.detect}


@dataclass
class InjectionCheck:
    probability: float
    index: int
    status: str = ""


@dataclass
class InjectionResponse:
    id: str
    object: str
    # The injection endpoint reports ``created`` as a string timestamp.
    created: str
    checks: List[InjectionCheck] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "InjectionResponse":
        return InjectionResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=str(data.get("created", "")),
            checks=[
                InjectionCheck(
                    probability=float(it.get("probability", 0.0)),
                    index=int(it.get("index", 0)),
                    status=it.get("status", ""),
                )
                for it in data.get("checks", []) or []
            ],
        )

    @property
    def detected(self) -> bool:
        """True when any check is more likely than not an injection."""
        return any(c.probability > 0.5 for c in self.checks)


# --- /PII -----------------------------------------------------------------


@dataclass
class PIIRequest:
    prompt: str
    replace: bool = False
    replace_method: ReplaceMethod = ReplaceMethod.RANDOM

    def __post_init__(self) -> None:
        self.replace_method = ReplaceMethod(self.replace_method)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "replace": self.replace,
            "replace_method": self.replace_method.value,
        }


@dataclass
class PIICheck:
    new_prompt: str
    index: int
    status: str = ""


@dataclass
class PIIResponse:
    id: Optional[str]
    object: Optional[str]
    created: Optional[str]
    checks: List[PIICheck] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "PIIResponse":
        created = data.get("created")
        return PIIResponse(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else str(created),
            checks=[
                PIICheck(
                    new_prompt=it.get("new_prompt", ""),
                    index=int(it.get("index", 0)),
                    status=it.get("status", ""),
                )
                for it in data.get("checks", []) or []
            ],
        )

    @property
    def masked_text(self) -> Optional[str]:
        return self.checks[0].new_prompt if self.checks else None


# --- /toxicity ------------------------------------------------------------


@dataclass
class ToxicityRequest:
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass
class ToxicityCheck:
    score: float
    index: int
    status: str = ""


@dataclass
class ToxicityResponse:
    id: Optional[str]
    object: Optional[str]
    created: Optional[int]
    checks: List[ToxicityCheck] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ToxicityResponse":
        created = data.get("created")
        return ToxicityResponse(
            id=data.get("id"),
            object=data.get("object"),
            created=None if created is None else int(created),
            checks=[
                ToxicityCheck(
                    score=float(it.get("score", 0.0)),
                    index=int(it.get("index", 0)),
                    status=it.get("status", ""),
                )
                for it in data.get("checks", []) or []
            ],
        )

    @property
    def score(self) -> Optional[float]:
        return self.checks[0].score if self.checks else None
