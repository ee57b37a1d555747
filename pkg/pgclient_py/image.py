"""Base64 image encoding for vision chat and image embeddings."""

from __future__ import annotations

from typing import Optional

import base64
import mimetypes
import urllib.parse

import requests

from .errors import APIConnectionError, ServerError


def encode(
    source: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> str:
    """Return the base64 encoding of the image at ``source``.

    ``source`` is either an ``http(s)`` URL, which is downloaded, or a path
    to a local file.
    """

    if urllib.parse.urlparse(source).scheme in ("http", "https"):
        data = _download(source, session=session, timeout=timeout)
    else:
        with open(source, "rb") as fh:
            data = fh.read()
    return base64.b64encode(data).decode("ascii")


def data_uri(source: str, *, mime_type: Optional[str] = None, **kwargs) -> str:
    """Encode ``source`` as a ``data:`` URI suitable for a chat vision message."""
    if mime_type is None:
        guessed, _ = mimetypes.guess_type(urllib.parse.urlparse(source).path)
        mime_type = guessed or "image/jpeg"
    return f"data:{mime_type};base64,{encode(source, **kwargs)}"


def _download(url: str, *, session: Optional[requests.Session], timeout: float) -> bytes:
    sess = session or requests.Session()
    try:
        resp = sess.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise APIConnectionError(url, str(exc)) from exc
    finally:
        if session is None:
            sess.close()

    if resp.status_code < 200 or resp.status_code >= 300:
        raise ServerError(resp.status_code, resp.content)
    return resp.content
