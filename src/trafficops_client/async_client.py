"""Public async client entrypoint."""

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


class AsyncTrafficOpsClient:
    """Asynchronous Traffic Ops API client; see :class:`TrafficOpsClient`."""

    def __init__(
        self,
        config: TrafficOpsClientConfig,
        *,
        client: httpx.AsyncClient | None = None,
        session: Session | None = None,
    ) -> None:
        validate_client_config(config)
        self._config = config
        self._session = session or Session()
        self._alerts = build_alert_handler(config)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
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
            raise ClientError("AsyncTrafficOpsClient is already closed")

    async def request(
        self,
        path: str,
        method: str,
        *,
        params: QueryParams | None = None,
        data: object = None,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
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
        raw = await self._client.request(**prepared.as_kwargs())
        return finish_call(raw, prepared, session=self._session, handler=self._alerts)

    async def get(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return await self.request(path, "GET", params=params, date_keys=date_keys)

    async def post(
        self,
        path: str,
        data: object = None,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return await self.request(path, "POST", params=params, data=data, date_keys=date_keys)

    async def put(
        self,
        path: str,
        data: object = None,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return await self.request(path, "PUT", params=params, data=data, date_keys=date_keys)

    async def delete(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        date_keys: DateKeySpec | None = None,
    ) -> TrafficOpsResponse:
        return await self.request(path, "DELETE", params=params, date_keys=date_keys)

    async def login(self, credentials: LoginRequest) -> None:
        """Authenticate, replacing any previously held session cookie on success."""

        self._ensure_open()
        prepared = prepare_login(self._config, credentials)
        raw = await self._client.request(**prepared.as_kwargs())
        finish_login(raw, credentials, session=self._session, handler=self._alerts)

    async def ping(self) -> TrafficOpsResponse:
        """Liveness probe; needs no login and its body is not an envelope."""

        self._ensure_open()
        prepared = prepare_ping(self._config)
        raw = await self._client.request(**prepared.as_kwargs())
        data = decode_json(raw.content) if raw.content.strip() else None
        return TrafficOpsResponse.from_httpx(raw, data)

    async def dbdump(self) -> bytes:
        return await self._binary("dbdump", "GET")

    async def generate_iso(self, request: Mapping[str, object]) -> bytes:
        """Generate a bootable system image from an ISO request."""

        return await self._binary("isos", "POST", data=request)

    async def _binary(
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
        raw = await self._client.request(**prepared.as_kwargs())
        self._session.refresh_from(raw.headers)
        return check_binary_response(raw, endpoint=path, handler=self._alerts)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncTrafficOpsClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncTrafficOpsClient",
]
