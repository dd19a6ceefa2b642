"""Shared helpers for the sync/async clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .config import TrafficOpsClientConfig
from .core.alerts import AlertHandler, resolve_alert_logger
from .core.dates import DateKeySpec
from .core.errors import APIError, ClientError
from .core.login import LoginRequest, OAuthLogin, PasswordLogin, TokenLogin
from .core.models import TrafficOpsResponse
from .core.request_shared import (
    JSON_CONTENT_TYPE,
    QueryParams,
    build_base_headers,
    decode_response,
    encode_body,
    encode_params,
    make_url,
    normalize_path,
    requires_authentication,
)
from .core.session import Session, session_cookie_from_headers

logger = logging.getLogger("trafficops_client")

MISSING_COOKIE_MESSAGE = (
    "Traffic Ops did not set the mojolicious authentication cookie in login response"
)


def validate_client_config(config: TrafficOpsClientConfig) -> None:
    if not isinstance(config, TrafficOpsClientConfig):
        raise ClientError("config must be a TrafficOpsClientConfig")
    try:
        config.validate()
    except ValueError as exc:
        raise ClientError(str(exc)) from exc


def build_alert_handler(config: TrafficOpsClientConfig) -> AlertHandler:
    return AlertHandler(
        logger=resolve_alert_logger(config.logger, enabled=config.alert_logging),
        raise_error_alerts=config.raise_error_alerts,
    )


@dataclass(slots=True, frozen=True)
class PreparedCall:
    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, str] | None
    content: bytes | None
    date_keys: DateKeySpec

    def as_kwargs(self) -> dict[str, object]:
        return {
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
            "params": self.params,
            "content": self.content,
        }


def authenticated_headers(
    config: TrafficOpsClientConfig,
    session: Session,
    path: str,
) -> dict[str, str]:
    """Headers for a call to ``path``; raises :class:`ClientError` when a required cookie is absent."""

    headers = build_base_headers(config)
    if requires_authentication(path) or session.authenticated:
        session.decorate(headers)
    return headers


def prepare_call(
    config: TrafficOpsClientConfig,
    session: Session,
    path: str,
    method: str,
    *,
    params: QueryParams | None,
    data: object,
    date_keys: DateKeySpec | None,
) -> PreparedCall:
    headers = authenticated_headers(config, session, path)
    content = None
    if data is not None:
        content = encode_body(data)
        headers["Content-Type"] = JSON_CONTENT_TYPE
    logger.debug("request start method=%s path=%s", method.upper(), normalize_path(path))
    return PreparedCall(
        method=method.upper(),
        url=make_url(config, path),
        headers=headers,
        params=encode_params(params),
        content=content,
        date_keys=date_keys if date_keys is not None else DateKeySpec.default(),
    )


def finish_call(
    raw: httpx.Response,
    prepared: PreparedCall,
    *,
    session: Session,
    handler: AlertHandler,
) -> TrafficOpsResponse:
    logger.debug(
        "response received method=%s url=%s http_status=%s",
        prepared.method,
        prepared.url,
        raw.status_code,
    )
    session.refresh_from(raw.headers)
    response = decode_response(raw, prepared.date_keys)
    handler.handle_response(response)
    return response


def prepare_login(
    config: TrafficOpsClientConfig,
    credentials: LoginRequest,
) -> PreparedCall:
    if not isinstance(credentials, (TokenLogin, OAuthLogin, PasswordLogin)):
        raise ClientError(
            "login requires a TokenLogin, OAuthLogin or PasswordLogin, "
            f"not {type(credentials).__name__}"
        )
    headers = build_base_headers(config)
    headers["Content-Type"] = JSON_CONTENT_TYPE
    logger.debug("login start kind=%s", credentials.kind)
    return PreparedCall(
        method="POST",
        url=make_url(config, credentials.path),
        headers=headers,
        params=None,
        content=encode_body(credentials.to_payload()),
        date_keys=DateKeySpec(),
    )


def finish_login(
    raw: httpx.Response,
    credentials: LoginRequest,
    *,
    session: Session,
    handler: AlertHandler,
) -> None:
    response = decode_response(raw, DateKeySpec())
    handler.handle(response.alerts, response_code=raw.status_code, headers=raw.headers)
    cookie = session_cookie_from_headers(raw.headers)
    if cookie is None:
        raise APIError(
            MISSING_COOKIE_MESSAGE,
            response_code=raw.status_code,
            headers=raw.headers,
        )
    session.replace(cookie)
    logger.info("login succeeded kind=%s", credentials.kind)


def prepare_ping(config: TrafficOpsClientConfig) -> PreparedCall:
    return PreparedCall(
        method="GET",
        url=make_url(config, "ping"),
        headers=build_base_headers(config),
        params=None,
        content=None,
        date_keys=DateKeySpec(),
    )


__all__ = [
    "MISSING_COOKIE_MESSAGE",
    "validate_client_config",
    "build_alert_handler",
    "PreparedCall",
    "authenticated_headers",
    "prepare_call",
    "finish_call",
    "prepare_login",
    "finish_login",
    "prepare_ping",
]
