from __future__ import annotations

import json
from typing import Optional, Sequence


class PGError(Exception):
    """Base class for every error raised by the Prediction Guard client."""


class ConfigurationError(PGError):
    """Raised when required configuration is missing from the environment."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        self.variable = self.missing[0] if self.missing else ""
        super().__init__(
            "missing configuration: " + ", ".join(self.missing)
            + " must be set in the environment"
        )


class APIConnectionError(PGError):
    """The request never produced a response (DNS, TLS, refused, timeout)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"connection to {url} failed: {reason}")


class ServerError(PGError):
    """HTTP/API level error returned by Prediction Guard.

    Raised when the API responds with a non-2xx HTTP status code. The raw
    body is kept so callers can inspect the server's error JSON.
    """

    def __init__(self, status_code: int, body: bytes):
        self.status_code = status_code
        self.body = body or b""
        self.error = _error_message(self.body)
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.error:
            return f"prediction guard api error: status={self.status_code} error={self.error}"
        if not self.body:
            return f"prediction guard api error: status={self.status_code}"
        body_str = self.body.decode("utf-8", errors="replace")
        return f"prediction guard api error: status={self.status_code} body={body_str}"


class DecodeError(PGError):
    """A response body or a stream frame could not be decoded.

    ``position`` is the zero-based index of the offending frame when the
    error comes from a stream, ``None`` for buffered responses. A stream
    remains usable after a ``DecodeError``.
    """

    def __init__(self, message: str, *, data: str = "", position: Optional[int] = None):
        self.data = data
        self.position = position
        super().__init__(message)


class StreamTruncatedError(PGError):
    """The event stream ended before the ``[DONE]`` sentinel arrived."""

    def __init__(self, message: str = "stream ended unexpectedly", *, mid_frame: bool = False):
        self.mid_frame = mid_frame
        super().__init__(message)


def _error_message(body: bytes) -> str:
    # The API reports failures as {"error": "..."}.
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return ""
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return ""
