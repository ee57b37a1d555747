"""Models for the ``/translate`` endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Union

TRANSLATE_PATH = "/translate"


class Language(str, Enum):
    """Languages supported by the translate endpoint, as ISO 639-3 codes."""

    AFRIKAANS = "afr"
    AMHARIC = "amh"
    ARABIC = "ara"
    ARMENIAN = "hye"
    AZERBAIJANI = "aze"
    BASQUE = "eus"
    BELARUSIAN = "bel"
    BENGALI = "ben"
    BOSNIAN = "bos"
    CATALAN = "cat"
    CHECHEN = "che"
    CHEROKEE = "chr"
    CHINESE = "zho"
    CROATIAN = "hrv"
    CZECH = "ces"
    DANISH = "dan"
    DUTCH = "nld"
    ENGLISH = "eng"
    ESTONIAN = "est"
    FIJIAN = "fij"
    FILIPINO = "fil"
    FINNISH = "fin"
    FRENCH = "fra"
    GALICIAN = "glg"
    GEORGIAN = "kat"
    GERMAN = "deu"
    GREEK = "ell"
    GUJARATI = "guj"
    HAITIAN = "hat"
    HEBREW = "heb"
    HINDI = "hin"
    HUNGARIAN = "hun"
    ICELANDIC = "isl"
    INDONESIAN = "ind"
    IRISH = "gle"
    ITALIAN = "ita"
    JAPANESE = "jpn"
    KANNADA = "kan"
    KAZAKH = "kaz"
    KOREAN = "kor"
    LATVIAN = "lav"
    LITHUANIAN = "lit"
    MACEDONIAN = "mkd"
    MALAY = "msa"
    MALAY_STANDARD = "zlm"
    MALAYALAM = "mal"
    MALTESE = "mlt"
    MARATHI = "mar"
    NEPALI = "nep"
    NORWEGIAN = "nor"
    PERSIAN = "fas"
    POLISH = "pol"
    PORTUGUESE = "por"
    ROMANIAN = "ron"
    RUSSIAN = "rus"
    SAMOAN = "smo"
    SERBIAN = "srp"
    SLOVAK = "slk"
    SLOVENIAN = "slv"
    SLAVONIC = "chu"
    SPANISH = "spa"
    SWAHILI = "swh"
    SWEDISH = "swe"
    TAMIL = "tam"
    TELUGU = "tel"
    THAI = "tha"
    TURKISH = "tur"
    UKRAINIAN = "ukr"
    URDU = "urd"
    WELSH = "cym"
    VIETNAMESE = "vie"


LanguageCode = Union[Language, str]


def parse_language(code: LanguageCode) -> LanguageCode:
    """Return the :class:`Language` for ``code``, or ``code`` itself when unknown."""
    if isinstance(code, Language):
        return code
    try:
        return Language(code)
    except ValueError:
        return code


def language_code(lang: LanguageCode) -> str:
    return lang.value if isinstance(lang, Language) else str(lang)


@dataclass
class TranslateRequest:
    text: str
    source_lang: LanguageCode
    target_lang: LanguageCode
    use_third_party_engine: bool = False

    def __post_init__(self) -> None:
        self.source_lang = parse_language(self.source_lang)
        self.target_lang = parse_language(self.target_lang)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "source_lang": language_code(self.source_lang),
            "target_lang": language_code(self.target_lang),
            "use_third_party_engine": self.use_third_party_engine,
        }


@dataclass
class Translation:
    score: float
    translation: str
    model: str
    status: str = ""


@dataclass
class TranslateResponse:
    id: str
    object: str
    created: int
    best_translation: str
    best_score: float
    best_translation_model: str
    translations: List[Translation] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "TranslateResponse":
        return TranslateResponse(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=int(data.get("created") or 0),
            best_translation=data.get("best_translation", ""),
            best_score=float(data.get("best_score") or 0.0),
            best_translation_model=data.get("best_translation_model", ""),
            translations=[
                Translation(
                    score=float(it.get("score") or 0.0),
                    translation=it.get("translation", ""),
                    model=it.get("model", ""),
                    status=it.get("status", ""),
                )
                for it in data.get("translations", []) or []
            ],
        )
