from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import os
import urllib.parse

import requests
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

URL_ENV = "PREDICTIONGUARD_URL"
API_KEY_ENV = "PREDICTIONGUARD_API_KEY"

DEFAULT_TIMEOUT = 45.0
DEFAULT_CONNECT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Credentials:
    """Host and API key used for every call.

    Attributes
    ----------
    host: str
        Base URL of the Prediction Guard API, for example::

            https://api.predictionguard.com

    api_key: str
        Key sent in the ``x-api-key`` header.
    """

    host: str
    api_key: str

    def __repr__(self) -> str:
        return f"Credentials(host={self.host!r}, api_key='***')"


def load_credentials(
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv: bool = True,
) -> Credentials:
    """Read :class:`Credentials` from the process environment.

    A ``.env`` file in the working directory (or a parent) is loaded first when ``dotenv``
    is true; variables already set in the environment win. Raises
    :class:`ConfigurationError` naming every variable that is unset.
    """

    if environ is None:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True), override=False)
        environ = os.environ

    host = (environ.get(URL_ENV) or "").strip()
    key = (environ.get(API_KEY_ENV) or "").strip()

    missing = [name for name, value in ((URL_ENV, host), (API_KEY_ENV, key)) if not value]
    if missing:
        raise ConfigurationError(missing)

    return Credentials(host=normalize_base_url(host), api_key=key)


@dataclass
class PGConfig:
    """Client configuration for talking to Prediction Guard.

    Attributes
    ----------
    credentials: Credentials
        Host and API key.
    session: Optional[requests.Session]
        Optional custom :class:`requests.Session`. If ``None``, a
        short-lived session is created per request.
    timeout: float
        Read timeout in seconds. Defaults to 45.0s.
    connect_timeout: float
        Connect timeout in seconds. Defaults to 30.0s.
    """

    credentials: Credentials
    session: Optional[requests.Session] = None
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_env(
        cls,
        *,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> "PGConfig":
        return cls(
            credentials=load_credentials(environ, dotenv=dotenv),
            session=session,
            timeout=timeout,
            connect_timeout=connect_timeout,
        )

    @property
    def base_url(self) -> str:
        return normalize_base_url(self.credentials.host)


def normalize_base_url(base_url: str) -> str:
    parsed = urllib.parse.urlparse(base_url)
    # "localhost:8080" parses with scheme "localhost", so require a netloc too
    if not parsed.scheme or not parsed.netloc:
        # Default to http if no scheme provided
        base_url = "http://" + base_url
    return base_url.rstrip("/")
