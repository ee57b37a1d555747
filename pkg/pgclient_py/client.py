from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

import json
import logging

import requests

from . import __version__
from .chat import CHAT_PATH, ChatChunk, ChatRequest, ChatResponse
from .checks import (
    FACTUALITY_PATH,
    INJECTION_PATH,
    PII_PATH,
    TOXICITY_PATH,
    FactualityRequest,
    FactualityResponse,
    InjectionRequest,
    InjectionResponse,
    PIIRequest,
    PIIResponse,
    ReplaceMethod,
    ToxicityRequest,
    ToxicityResponse,
)
from .completion import COMPLETION_PATH, CompletionChunk, CompletionRequest, CompletionResponse
from .config import PGConfig
from .embedding import (
    EMBEDDING_PATH,
    RERANK_PATH,
    TOKENIZE_PATH,
    EmbeddingRequest,
    EmbeddingResponse,
    RerankRequest,
    RerankResponse,
    TokenizeRequest,
    TokenizeResponse,
)
from .errors import APIConnectionError, DecodeError, ServerError
from .models import ModelsResponse, models_path
from .sse import EventStream
from .translate import TRANSLATE_PATH, LanguageCode, TranslateRequest, TranslateResponse

logger = logging.getLogger(__name__)

USER_AGENT = f"Prediction Guard Python Client v{__version__}"
HEALTH_PATH = "/"

R = TypeVar("R")


class PGClient:
    """Prediction Guard API client.

    One method per endpoint. Every call is a single attempt; failures are
    raised as :class:`~pgclient_py.errors.PGError` subclasses.
    """

    def __init__(self, config: PGConfig):
        if not config.credentials.host:
            raise ValueError("host is required")
        if not config.credentials.api_key:
            raise ValueError("api_key is required")
        self._base_url = config.base_url
        self._api_key = config.credentials.api_key
        self._session = config.session
        self._timeout = (config.connect_timeout, config.timeout)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "PGClient":
        """Build a client from ``PREDICTIONGUARD_URL`` / ``PREDICTIONGUARD_API_KEY``."""
        return cls(PGConfig.from_env(**kwargs))

    @property
    def base_url(self) -> str:
        return self._base_url

    # --- health -----------------------------------------------------------

    def health(self, *, headers: Optional[Mapping[str, str]] = None) -> str:
        """Call the health endpoint and return its text body."""

        resp = _send(
            method="GET",
            url=self._url(HEALTH_PATH),
            body=None,
            headers=self._headers(headers),
            session=self._session,
            timeout=self._timeout,
        )
        _raise_for_status(resp)
        return resp.text

    # --- /chat/completions ------------------------------------------------

    def chat_completions(
        self,
        req: ChatRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ChatResponse:
        """Call the chat completion endpoint; vision messages use the same call."""

        data = self._post(CHAT_PATH, replace(req, stream=False).to_payload(), headers)
        return _decode(ChatResponse.from_dict, data)

    def chat_completions_stream(
        self,
        req: ChatRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> EventStream[ChatChunk]:
        """Stream a chat completion.

        Output checks are not available for streamed responses and are
        dropped from the request. Use the returned stream as a context
        manager, or call ``close()``, to release the connection when
        stopping early.
        """

        payload = replace(req, stream=True, output=None).to_payload()
        return self._stream(CHAT_PATH, payload, ChatChunk.from_dict, headers)

    # Convenience wrapper around :meth:`chat_completions` for a single prompt
    def chat_text(
        self,
        model: str,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        req = ChatRequest(model=model, max_tokens=max_tokens, temperature=temperature)
        if system:
            req.add_message("system", system)
        req.add_message("user", prompt)
        return self.chat_completions(req, headers=headers).text

    # --- /completions -----------------------------------------------------

    def completions(
        self,
        req: CompletionRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> CompletionResponse:
        data = self._post(COMPLETION_PATH, replace(req, stream=False).to_payload(), headers)
        return _decode(CompletionResponse.from_dict, data)

    def completions_stream(
        self,
        req: CompletionRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> EventStream[CompletionChunk]:
        payload = replace(req, stream=True, output=None).to_payload()
        return self._stream(COMPLETION_PATH, payload, CompletionChunk.from_dict, headers)

    # --- guardrails -------------------------------------------------------

    def factuality(
        self,
        req: FactualityRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FactualityResponse:
        data = self._post(FACTUALITY_PATH, req.to_payload(), headers)
        return _decode(FactualityResponse.from_dict, data)

    def injection(
        self,
        req: InjectionRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> InjectionResponse:
        data = self._post(INJECTION_PATH, req.to_payload(), headers)
        return _decode(InjectionResponse.from_dict, data)

    def pii(
        self,
        req: PIIRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> PIIResponse:
        data = self._post(PII_PATH, req.to_payload(), headers)
        return _decode(PIIResponse.from_dict, data)

    # Convenience wrapper around :meth:`pii` that replaces what it finds
    def mask_pii(
        self,
        prompt: str,
        *,
        replace_method: ReplaceMethod = ReplaceMethod.MASK,
        headers: Optional[Mapping[str, str]] = None,
    ) -> PIIResponse:
        req = PIIRequest(prompt=prompt, replace=True, replace_method=replace_method)
        return self.pii(req, headers=headers)

    def toxicity(
        self,
        req: ToxicityRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ToxicityResponse:
        data = self._post(TOXICITY_PATH, req.to_payload(), headers)
        return _decode(ToxicityResponse.from_dict, data)

    def check_toxicity(self, text: str, *, headers: Optional[Mapping[str, str]] = None) -> ToxicityResponse:
        return self.toxicity(ToxicityRequest(text=text), headers=headers)

    # --- /translate -------------------------------------------------------

    def translate(
        self,
        req: TranslateRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TranslateResponse:
        data = self._post(TRANSLATE_PATH, req.to_payload(), headers)
        return _decode(TranslateResponse.from_dict, data)

    def translate_text(
        self,
        text: str,
        source_lang: LanguageCode,
        target_lang: LanguageCode,
        *,
        use_third_party_engine: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TranslateResponse:
        req = TranslateRequest(
            text=text,
            source_lang=source_lang,
            target_lang=target_lang,
            use_third_party_engine=use_third_party_engine,
        )
        return self.translate(req, headers=headers)

    # --- embeddings, rerank, tokenize ------------------------------------

    def embeddings(
        self,
        req: EmbeddingRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> EmbeddingResponse:
        data = self._post(EMBEDDING_PATH, req.to_payload(), headers)
        return _decode(EmbeddingResponse.from_dict, data)

    def rerank(
        self,
        req: RerankRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> RerankResponse:
        data = self._post(RERANK_PATH, req.to_payload(), headers)
        return _decode(RerankResponse.from_dict, data)

    def tokenize(
        self,
        req: TokenizeRequest,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TokenizeResponse:
        data = self._post(TOKENIZE_PATH, req.to_payload(), headers)
        return _decode(TokenizeResponse.from_dict, data)

    # --- /models ----------------------------------------------------------

    def models(
        self,
        capability: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ModelsResponse:
        """List available models, optionally only those with ``capability``."""

        data = _request_json(
            method="GET",
            url=self._url(models_path(capability)),
            body=None,
            headers=self._headers(headers),
            session=self._session,
            timeout=self._timeout,
        )
        return _decode(ModelsResponse.from_dict, data)

    def model_list(self, capability: str, *, headers: Optional[Mapping[str, str]] = None) -> List[str]:
        """Return the ids of the models that support ``capability``."""
        return self.models(capability, headers=headers).ids

    # --- internals --------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _headers(self, extra: Optional[Mapping[str, str]], *, stream: bool = False) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "x-api-key": self._api_key,
            "User-Agent": USER_AGENT,
        }
        if stream:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["Accept"] = "text/event-stream"
        if extra:
            headers.update(extra)
        return headers

    def _post(self, path: str, body: Mapping[str, Any], headers: Optional[Mapping[str, str]]) -> Any:
        return _request_json(
            method="POST",
            url=self._url(path),
            body=body,
            headers=self._headers(headers),
            session=self._session,
            timeout=self._timeout,
        )

    def _stream(
        self,
        path: str,
        body: Mapping[str, Any],
        parse: Callable[[Mapping[str, Any]], R],
        headers: Optional[Mapping[str, str]],
    ) -> EventStream[R]:
        url = self._url(path)
        resp, release = _open_stream(
            url=url,
            body=body,
            headers=self._headers(headers, stream=True),
            session=self._session,
            timeout=self._timeout,
        )
        return EventStream(resp.iter_content(chunk_size=None), parse, release=release, url=url)


# --- Low-level HTTP helpers ----------------------------------------------


def _send(
    *,
    method: str,
    url: str,
    body: Optional[Mapping[str, Any]],
    headers: Mapping[str, str],
    session: Optional[requests.Session],
    timeout: Tuple[float, float],
) -> requests.Response:
    all_headers: Dict[str, str] = dict(headers)
    payload = None
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        all_headers["Content-Type"] = "application/json"

    sess = session or requests.Session()
    try:
        resp = sess.request(method, url, data=payload, headers=all_headers, timeout=timeout)
    except requests.RequestException as exc:
        raise APIConnectionError(url, str(exc)) from exc
    finally:
        if session is None:
            sess.close()

    logger.debug("%s %s -> %d", method, url, resp.status_code)
    return resp


def _request_json(
    *,
    method: str,
    url: str,
    body: Optional[Mapping[str, Any]],
    headers: Mapping[str, str],
    session: Optional[requests.Session],
    timeout: Tuple[float, float],
) -> Any:
    resp = _send(method=method, url=url, body=body, headers=headers, session=session, timeout=timeout)
    _raise_for_status(resp)

    try:
        return resp.json()
    except ValueError as exc:
        raise DecodeError(
            f"failed to decode response body from {url}: {exc}",
            data=resp.content.decode("utf-8", errors="replace"),
        ) from exc


def _open_stream(
    *,
    url: str,
    body: Mapping[str, Any],
    headers: Mapping[str, str],
    session: Optional[requests.Session],
    timeout: Tuple[float, float],
) -> Tuple[requests.Response, Callable[[], None]]:
    all_headers: Dict[str, str] = dict(headers)
    all_headers["Content-Type"] = "application/json"
    payload = json.dumps(body).encode("utf-8")

    sess = session or requests.Session()
    try:
        resp = sess.post(url, data=payload, headers=all_headers, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        if session is None:
            sess.close()
        raise APIConnectionError(url, str(exc)) from exc

    def release() -> None:
        resp.close()
        if session is None:
            sess.close()

    logger.debug("POST %s -> %d (stream)", url, resp.status_code)

    if resp.status_code < 200 or resp.status_code >= 300:
        try:
            content = resp.content
        except requests.RequestException as exc:
            raise APIConnectionError(url, str(exc)) from exc
        finally:
            release()
        raise ServerError(resp.status_code, content)

    return resp, release


def _raise_for_status(resp: requests.Response) -> None:
    if resp.status_code < 200 or resp.status_code >= 300:
        # Keep raw bytes so callers can inspect the raw error JSON
        raise ServerError(resp.status_code, resp.content)


def _decode(parse: Callable[[Mapping[str, Any]], R], data: Any) -> R:
    if not isinstance(data, dict):
        raise DecodeError("expected JSON object in response body", data=json.dumps(data))
    try:
        return parse(data)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise DecodeError(f"unexpected response shape: {exc}", data=json.dumps(data)) from exc
