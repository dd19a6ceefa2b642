"""Authentication state shared by every request a client makes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, MutableMapping

import httpx

from .errors import ClientError

logger = logging.getLogger("trafficops_client")

COOKIE_NAME = "mojolicious"


def find_session_cookie(set_cookie_values: Iterable[str]) -> str | None:
    """Return the ``mojolicious=<value>`` pair from ``Set-Cookie`` values, if any.

    Cookie attributes (``Path``, ``Expires``, ...) are dropped; only the
    name/value pair is ever sent back.
    """

    prefix = f"{COOKIE_NAME}="
    for raw in set_cookie_values:
        pair = raw.split(";", 1)[0].strip()
        if pair.startswith(prefix):
            return pair
    return None


def session_cookie_from_headers(headers: httpx.Headers) -> str | None:
    return find_session_cookie(headers.get_list("set-cookie"))


class Session:
    """Holds at most one Traffic Ops session cookie.

    The cookie is never handed out; it only decorates outgoing request
    headers. Replacement is serialized by a lock, and the last renewal to
    be stored wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cookie: str | None = None

    def __repr__(self) -> str:
        return f"Session(authenticated={self.authenticated})"

    @property
    def authenticated(self) -> bool:
        """Whether a cookie was ever obtained; it may have expired since."""

        with self._lock:
            return self._cookie is not None

    def decorate(self, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        with self._lock:
            cookie = self._cookie
        if cookie is None:
            raise ClientError("not authenticated")
        headers["Cookie"] = cookie
        return headers

    def replace(self, cookie: str) -> None:
        with self._lock:
            self._cookie = cookie

    def refresh_from(self, headers: httpx.Headers) -> bool:
        """Store a renewed cookie carried by ``headers``; report whether one was found."""

        cookie = session_cookie_from_headers(headers)
        if cookie is None:
            return False
        with self._lock:
            renewed = cookie != self._cookie
            self._cookie = cookie
        if renewed:
            logger.debug("session cookie renewed")
        return True


__all__ = [
    "COOKIE_NAME",
    "find_session_cookie",
    "session_cookie_from_headers",
    "Session",
]
