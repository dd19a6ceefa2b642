"""Public client entrypoint."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType

import httpx

from .client_shared import (
    build_alert_handler,
    finish_call,
    finish_login,
    prepare_call,
    prepare_login,
    prepare_ping,
    validate_client_config,
)
from .config import TrafficOpsClientConfig
from .core.dates import DateKeySpec, decode_json
from .core.errors import ClientError
from .core.login import LoginRequest
from .core.models import TrafficOpsResponse
from .core.request_shared import (
    QueryParams,
    build_default_timeout,
    check_binary_response,
    make_url,
)
from .core.session import Session


class TrafficOpsClient:
    """Traffic Ops API client.

    Every resource call goes through :meth:`request`, which attaches the
    session cookie, revives dates in the response, picks up renewed
    cookies, and logs or raises the response's Alerts.
    """

    def __init__(
        self,
        config: TrafficOpsClientConfig,
        *,
        client: httpx.Client | None = None,
        session: Session | None = None,
    ) -> None:
        validate_client_config(config)
        self._config = config
        self._session = session or Session()
        self._alerts = build_alert_handler(config)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=build_default_timeout(config),
            verify=config.transport.verify_tls,
        )
        self._closed = False

    @property
    def config(self) -> TrafficOpsClientConfig:
        return self._config

    @property
    def authenticated(self) -> bool:
        """Tells whether the client has logged in; the session may have expired since."""

        return self._session.authenticated

    def make_url(self, path: str) -> str:
        return make_url(self._config, path)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientError("TrafficOpsClient is already closed")

    def request(
        self,
        path: str,
        method: str,
        *,
        params: QueryParams | None = None,
        data: object = None,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        """Perform a request against ``api/<version>/<path>``.

        Error-level Alerts raise :class:`APIError` when the client is
        configured to; transport failures propagate from httpx untouched.
        """

        self._ensure_open()
        prepared = prepare_call(
            self._config,
            self._session,
            path,
            method,
            params=params,
            data=data,
            date_keys=date_keys,
        )
        raw = self._client.request(**prepared.as_kwargs())
        return finish_call(raw, prepared, session=self._session, handler=self._alerts)

    def get(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return self.request(path, "GET", params=params, date_keys=date_keys)

    def post(
        self,
        path: str,
        data: object = None,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return self.request(path, "POST", params=params, data=data, date_keys=date_keys)

    def put(
        self,
        path: str,
        data: object = None,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return self.request(path, "PUT", params=params, data=data, date_keys=date_keys)

    def delete(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return self.request(path, "DELETE", params=params, date_keys=date_keys)

    def login(self, credentials: LoginRequest) -> None:
        """Authenticate, replacing any previously held session cookie on success."""

        self._ensure_open()
        prepared = prepare_login(self._config, credentials)
        raw = self._client.request(**prepared.as_kwargs())
        finish_login(raw, credentials, session=self._session, handler=self._alerts)

    def ping(self) -> TrafficOpsResponse:
        """Liveness probe; needs no login and its body is not an envelope."""

        self._ensure_open()
        prepared = prepare_ping(self._config)
        raw = self._client.request(**prepared.as_kwargs())
        data = decode_json(raw.content) if raw.content.strip() else None
        return TrafficOpsResponse.from_httpx(raw, data)

    def dbdump(self) -> bytes:
        """Dump the entire Traffic Ops database as an SQL script.

        The dump can contain users' credentials. The endpoint does not speak
        JSON, so failures are judged from the status code alone.
        """

        return self._binary("dbdump", "GET")

    def generate_iso(self, request: Mapping[str, object]) -> bytes:
        """Generate a bootable system image from an ISO request."""

        return self._binary("isos", "POST", data=request)

    def _binary(
        self,
        path: str,
        method: str,
        *,
        data: Mapping[str, object] | None = None,
    ) -> bytes:
        self._ensure_open()
        prepared = prepare_call(
            self._config,
            self._session,
            path,
            method,
            params=None,
            data=data,
            date_keys=DateKeySpec(),
        )
        raw = self._client.request(**prepared.as_kwargs())
        self._session.refresh_from(raw.headers)
        return check_binary_response(raw, endpoint=path, handler=self._alerts)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TrafficOpsClient":
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close()
        return False


__all__ = [
    "TrafficOpsClient",
]
