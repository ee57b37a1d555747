"""pgclient-py – Python client for the Prediction Guard API.

Typed request/response models and an HTTP/SSE transport for the Prediction
Guard endpoints: chat and text completion (buffered or streamed),
factuality, prompt injection, PII, toxicity, translation, embeddings,
rerank, tokenize and the model catalogue.

Credentials come from ``PREDICTIONGUARD_URL`` and
``PREDICTIONGUARD_API_KEY`` (a ``.env`` file is honoured)::

    from pgclient_py import PGClient, ChatRequest, Role

    client = PGClient.from_env()
    req = ChatRequest(model="Hermes-2-Pro-Llama-3-8B", max_tokens=300)
    req.add_message(Role.USER, "How do you feel about the world in general?")
    print(client.chat_completions(req).text)
"""

__version__ = "0.1.0"

from .config import (
    API_KEY_ENV,
    URL_ENV,
    Credentials,
    PGConfig,
    load_credentials,
)
from .errors import (
    PGError,
    ConfigurationError,
    APIConnectionError,
    ServerError,
    DecodeError,
    StreamTruncatedError,
)
from .chat import (
    ChatRequest,
    ChatResponse,
    ChatChunk,
    InputChecks,
    OutputChecks,
    Role,
)
from .completion import (
    CompletionRequest,
    CompletionResponse,
    CompletionChunk,
)
from .checks import (
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
from .translate import Language, TranslateRequest, TranslateResponse
from .embedding import (
    Direction,
    EmbeddingInput,
    EmbeddingRequest,
    EmbeddingResponse,
    RerankRequest,
    RerankResponse,
    TokenizeRequest,
    TokenizeResponse,
)
from .models import ModelsResponse
from .sse import EventStream, ServerSentEvent, SSEDecoder
from .client import PGClient

__all__ = [
    "__version__",
    "API_KEY_ENV",
    "URL_ENV",
    "Credentials",
    "PGConfig",
    "load_credentials",
    "PGError",
    "ConfigurationError",
    "APIConnectionError",
    "ServerError",
    "DecodeError",
    "StreamTruncatedError",
    "ChatRequest",
    "ChatResponse",
    "ChatChunk",
    "InputChecks",
    "OutputChecks",
    "Role",
    "CompletionRequest",
    "CompletionResponse",
    "CompletionChunk",
    "FactualityRequest",
    "FactualityResponse",
    "InjectionRequest",
    "InjectionResponse",
    "PIIRequest",
    "PIIResponse",
    "ReplaceMethod",
    "ToxicityRequest",
    "ToxicityResponse",
    "Language",
    "TranslateRequest",
    "TranslateResponse",
    "Direction",
    "EmbeddingInput",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "RerankRequest",
    "RerankResponse",
    "TokenizeRequest",
    "TokenizeResponse",
    "ModelsResponse",
    "EventStream",
    "ServerSentEvent",
    "SSEDecoder",
    "PGClient",
]
