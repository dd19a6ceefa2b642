"""Core response models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from .alerts import Alert, parse_alerts
from .errors import APIError


@dataclass(slots=True, frozen=True)
class Envelope:
    """The ``{"response": ..., "alerts": [...]}`` shape most endpoints use."""

    response: object
    alerts: tuple[Alert, ...] = ()

    @classmethod
    def from_payload(cls, payload: object) -> "Envelope":
        if not isinstance(payload, Mapping):
            return cls(response=None)
        return cls(
            response=payload.get("response"),
            alerts=parse_alerts(payload.get("alerts")),
        )


@dataclass(slots=True, frozen=True)
class PingEnvelope:
    """The ``ping`` endpoint answers ``{"ping": "pong"}``, outside the usual envelope."""

    ping: str | None

    @classmethod
    def from_payload(cls, payload: object) -> "PingEnvelope":
        if not isinstance(payload, Mapping):
            return cls(ping=None)
        value = payload.get("ping")
        return cls(ping=str(value) if value is not None else None)


@dataclass(slots=True, frozen=True)
class TrafficOpsResponse:
    status_code: int
    reason_phrase: str
    headers: httpx.Headers = field(repr=False)
    data: object

    @classmethod
    def from_httpx(cls, response: httpx.Response, data: object) -> "TrafficOpsResponse":
        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=response.headers,
            data=data,
        )

    @property
    def alerts(self) -> tuple[Alert, ...]:
        if not isinstance(self.data, Mapping):
            return ()
        return parse_alerts(self.data.get("alerts"))

    @property
    def envelope(self) -> Envelope:
        return Envelope.from_payload(self.data)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def single_response(
    response: TrafficOpsResponse,
    object_type: str,
    identifier: str | int,
    *,
    zero_results_is_error: bool = True,
) -> Envelope:
    """Collapse an identifier-filtered array response to its one element.

    Raises :class:`APIError` when the ``response`` member is missing or not an
    array, holds more than one element, or (unless ``zero_results_is_error``
    is False) holds none; an allowed empty result yields ``response=None``.
    """

    prefix = f"requesting {object_type} by identifier '{identifier}' yielded"
    envelope = response.envelope
    results = envelope.response
    if not isinstance(results, list):
        raise APIError(
            f"{prefix} malformed response",
            response_code=response.status_code,
            headers=response.headers,
        )
    if len(results) > 1:
        raise APIError(
            f"{prefix} {len(results)} results",
            response_code=response.status_code,
            headers=response.headers,
        )
    if not results:
        if zero_results_is_error:
            raise APIError(
                f"{prefix} 0 results",
                response_code=response.status_code,
                headers=response.headers,
            )
        return Envelope(response=None, alerts=envelope.alerts)
    return Envelope(response=results[0], alerts=envelope.alerts)


__all__ = [
    "Envelope",
    "PingEnvelope",
    "TrafficOpsResponse",
    "single_response",
]
