"""Client configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from .core.alerts import AlertLogger

DEFAULT_USER_AGENT = "trafficops-client/0.1.0"


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0
    verify_tls: bool = True

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")
        if not isinstance(self.verify_tls, bool):
            raise ValueError("transport.verify_tls must be bool")


@dataclass(slots=True, frozen=True)
class APIVersion:
    major: int = 4
    minor: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"

    def validate(self) -> None:
        if self.major < 1:
            raise ValueError("api_version.major must be >= 1")
        if self.minor < 0:
            raise ValueError("api_version.minor must be >= 0")


@dataclass(slots=True, frozen=True)
class TrafficOpsClientConfig:
    """Runtime configuration for a Traffic Ops client.

    ``base_url`` is the server root only (``https://trafficops.example``);
    the ``api/<version>`` prefix is added to every request path.
    """

    base_url: str
    api_version: APIVersion = field(default_factory=APIVersion)
    alert_logging: bool = False
    logger: AlertLogger | logging.Logger | None = None
    raise_error_alerts: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    transport: TransportConfig = field(default_factory=TransportConfig)

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid Traffic Ops URL: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"invalid Traffic Ops URL: '{self.base_url}'")
        if url.path not in ("", "/"):
            raise ValueError(
                "the Traffic Ops URL must be only the server's root URL; "
                f"path specified: '{url.path}'"
            )
        if not isinstance(self.alert_logging, bool):
            raise ValueError("alert_logging must be bool")
        if not isinstance(self.raise_error_alerts, bool):
            raise ValueError("raise_error_alerts must be bool")
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")
        self.api_version.validate()
        self.transport.validate()

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/") + "/"


__all__ = [
    "DEFAULT_USER_AGENT",
    "TransportConfig",
    "APIVersion",
    "TrafficOpsClientConfig",
]
