from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

import pytest

from pgclient_py import Credentials, PGClient, PGConfig


class FakeResponse:
    """Stand-in for :class:`requests.Response` with a canned body."""

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        *,
        content: Optional[bytes] = None,
        chunks: Optional[Iterable[bytes]] = None,
    ):
        self.status_code = status_code
        if content is None:
            content = b"" if body is None else json.dumps(body).encode("utf-8")
        self.content = content
        self._chunks = chunks
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))

    def iter_content(self, chunk_size=None):
        return iter(self._chunks if self._chunks is not None else [self.content])

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Records outgoing calls and replays queued responses or errors."""

    def __init__(self, *responses: Any):
        self._responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _next(self, call: Dict[str, Any]) -> FakeResponse:
        self.calls.append(call)
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def request(self, method, url, data=None, headers=None, timeout=None, stream=False):
        return self._next(
            {"method": method, "url": url, "data": data, "headers": headers, "timeout": timeout, "stream": stream}
        )

    def post(self, url, data=None, headers=None, timeout=None, stream=False):
        return self.request("POST", url, data=data, headers=headers, timeout=timeout, stream=stream)

    def get(self, url, headers=None, timeout=None):
        return self.request("GET", url, headers=headers, timeout=timeout)

    def close(self) -> None:
        self.closed = True

    @property
    def last_body(self) -> Dict[str, Any]:
        return json.loads(self.calls[-1]["data"].decode("utf-8"))


@pytest.fixture
def make_client():
    def _make(*responses: Any) -> "tuple[PGClient, FakeSession]":
        session = FakeSession(*responses)
        config = PGConfig(
            credentials=Credentials(host="http://pg.test", api_key="api-key"),
            session=session,  # type: ignore[arg-type]
        )
        return PGClient(config), session

    return _make
