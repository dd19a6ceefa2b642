"""Shared helpers for the sync/async request pipelines."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime

import httpx

from ..config import TrafficOpsClientConfig
from .alerts import AlertHandler
from .dates import DateKeySpec, decode_json, format_timestamp
from .errors import APIError
from .models import TrafficOpsResponse

QueryValue = str | int | float | bool | datetime | None
QueryParams = Mapping[str, QueryValue]

JSON_CONTENT_TYPE = "application/json"

# Endpoints that answer without a session cookie.
UNAUTHENTICATED_PATHS = frozenset({"ping"})


def build_default_timeout(config: TrafficOpsClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


def normalize_path(path: str) -> str:
    return path.lstrip("/")


def make_url(config: TrafficOpsClientConfig, path: str) -> str:
    return f"{config.root_url}api/{config.api_version}/{normalize_path(path)}"


def requires_authentication(path: str) -> bool:
    return normalize_path(path).rstrip("/") not in UNAUTHENTICATED_PATHS


def build_base_headers(config: TrafficOpsClientConfig) -> dict[str, str]:
    return {"User-Agent": config.user_agent}


def _encode_query_value(value: str | int | float | bool | datetime) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return format_timestamp(value)
    return str(value)


def encode_params(params: QueryParams | None) -> dict[str, str] | None:
    if not params:
        return None
    return {
        key: _encode_query_value(value)
        for key, value in params.items()
        if value is not None
    }


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return format_timestamp(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(data: object) -> bytes:
    return json.dumps(data, default=_json_default).encode("utf-8")


def decode_response(
    response: httpx.Response,
    date_keys: DateKeySpec | None,
) -> TrafficOpsResponse:
    """Decode a JSON response body; an empty body decodes to ``None``."""

    content = response.content
    data = decode_json(content, date_keys) if content.strip() else None
    return TrafficOpsResponse.from_httpx(response, data)


def check_binary_response(
    response: httpx.Response,
    *,
    endpoint: str,
    handler: AlertHandler,
) -> bytes:
    """Binary endpoints carry no Alerts; their status code is all there is to go on."""

    if handler.raise_error_alerts and not response.is_success:
        body = response.content.decode("utf-8", errors="replace")
        raise APIError(
            f"{endpoint} returned error response: {body}",
            response_code=response.status_code,
            headers=response.headers,
        )
    return response.content


__all__ = [
    "QueryValue",
    "QueryParams",
    "JSON_CONTENT_TYPE",
    "UNAUTHENTICATED_PATHS",
    "build_default_timeout",
    "normalize_path",
    "make_url",
    "requires_authentication",
    "build_base_headers",
    "encode_params",
    "encode_body",
    "decode_response",
    "check_binary_response",
]
