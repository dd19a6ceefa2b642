"""Error types raised by the client."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .alerts import Alert
    from .models import TrafficOpsResponse

NOT_REPORTED_MESSAGE = "error not reported in alerts"

HeadersLike = httpx.Headers | Mapping[str, str] | Sequence[tuple[str, str]]


def _quote_list(parameters: Sequence[str]) -> str:
    quoted = [f"'{name}'" for name in parameters]
    if len(quoted) == 1:
        return quoted[0]
    if len(quoted) == 2:
        return f"{quoted[0]} and {quoted[1]}"
    return ", ".join(quoted[:-1]) + f", and {quoted[-1]}"


class ClientError(Exception):
    """A caller broke a method's argument contract.

    Never the result of talking to Traffic Ops; it is always raised before
    any request is sent.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.method: str | None = None
        self.parameters: tuple[str, ...] = ()

    @classmethod
    def missing_parameters(cls, method: str, *parameters: str) -> "ClientError":
        if not parameters:
            raise ValueError("at least one missing parameter must be named")
        err = cls(f"invalid call signature to {method} - {_quote_list(parameters)} must be given")
        err.method = method
        err.parameters = tuple(parameters)
        return err


class APIError(Exception):
    """Traffic Ops reported a failure, through Alerts or its status code."""

    def __init__(
        self,
        message: str,
        *,
        response_code: int | None = None,
        headers: HeadersLike | None = None,
        alerts: Iterable["Alert"] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.response_code = response_code if response_code is not None else 0
        self.headers = httpx.Headers(headers) if headers is not None else httpx.Headers()
        self.alerts: tuple[Alert, ...] = tuple(alerts)

    @classmethod
    def from_alerts(
        cls,
        alerts: Iterable["Alert"],
        *,
        response_code: int | None = None,
        headers: HeadersLike | None = None,
    ) -> "APIError":
        from .alerts import error_texts

        collected = tuple(alerts)
        texts = error_texts(collected)
        message = "; ".join(texts) if texts else NOT_REPORTED_MESSAGE
        return cls(message, response_code=response_code, headers=headers, alerts=collected)

    @classmethod
    def from_alert(
        cls,
        alert: "Alert",
        *,
        response_code: int | None = None,
        headers: HeadersLike | None = None,
    ) -> "APIError":
        from .alerts import AlertLevel

        if alert.level is not AlertLevel.ERROR:
            raise ValueError("APIError.from_alert requires an error-level Alert")
        return cls(alert.text, response_code=response_code, headers=headers, alerts=(alert,))

    @classmethod
    def from_response(cls, response: "TrafficOpsResponse") -> "APIError":
        from .alerts import error_texts

        alerts = response.alerts
        texts = error_texts(alerts)
        if texts:
            message = "; ".join(texts)
        elif response.status_code > 299:
            message = response.reason_phrase
        else:
            message = NOT_REPORTED_MESSAGE
        return cls(
            message,
            response_code=response.status_code,
            headers=response.headers,
            alerts=alerts,
        )


__all__ = [
    "NOT_REPORTED_MESSAGE",
    "ClientError",
    "APIError",
]
