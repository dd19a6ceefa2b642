"""Alert parsing, logging and error classification."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import APIError, HeadersLike

if TYPE_CHECKING:
    from .models import TrafficOpsResponse

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

ALERT_LOGGER_NAME = "trafficops_client.alerts"
CONSOLE_ALERT_LOGGER_NAME = f"{ALERT_LOGGER_NAME}.console"


class AlertLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def parse(cls, value: object) -> "AlertLevel | str":
        """Match a wire level case-insensitively; unknown levels are kept raw."""

        text = str(value) if value is not None else ""
        try:
            return cls(text.lower())
        except ValueError:
            return text


@dataclass(slots=True, frozen=True)
class Alert:
    level: AlertLevel | str
    text: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "Alert":
        text = payload.get("text")
        return cls(
            level=AlertLevel.parse(payload.get("level")),
            text=str(text) if text is not None else "",
        )

    @property
    def is_error(self) -> bool:
        return self.level is AlertLevel.ERROR


def parse_alerts(raw: object) -> tuple[Alert, ...]:
    if isinstance(raw, Alert):
        return (raw,)
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return ()
    alerts: list[Alert] = []
    for item in raw:
        if isinstance(item, Alert):
            alerts.append(item)
        elif isinstance(item, Mapping):
            alerts.append(Alert.from_payload(item))
    return tuple(alerts)


def error_texts(alerts: Iterable[Alert]) -> list[str]:
    return [alert.text for alert in alerts if alert.is_error and alert.text]


@runtime_checkable
class AlertLogger(Protocol):
    def error(self, text: str) -> None: ...
    def warning(self, text: str) -> None: ...
    def info(self, text: str) -> None: ...
    def success(self, text: str) -> None: ...


class LoggingAlertLogger:
    """Adapts a stdlib logger to the four alert channels.

    Success alerts are emitted at the custom ``SUCCESS`` level, between
    INFO and WARNING.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(ALERT_LOGGER_NAME)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def error(self, text: str) -> None:
        self._logger.error("%s", text)

    def warning(self, text: str) -> None:
        self._logger.warning("%s", text)

    def info(self, text: str) -> None:
        self._logger.info("%s", text)

    def success(self, text: str) -> None:
        self._logger.log(SUCCESS, "%s", text)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr


def console_alert_logger() -> logging.Logger:
    """Logger used when alert logging is on but no logger was given.

    It prints every level to stderr on its own and does not propagate, so
    it works without any logging configuration in the application.
    """

    logger = logging.getLogger(CONSOLE_ALERT_LOGGER_NAME)
    if not any(isinstance(handler, _StderrHandler) for handler in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
    return logger


def resolve_alert_logger(
    logger: AlertLogger | logging.Logger | None,
    *,
    enabled: bool,
) -> AlertLogger | None:
    if not enabled:
        return None
    if logger is None:
        return LoggingAlertLogger(console_alert_logger())
    if isinstance(logger, logging.Logger):
        return LoggingAlertLogger(logger)
    return logger


AlertChannel = Callable[[AlertLogger, str], None]


def _log_error(logger: AlertLogger, text: str) -> None:
    logger.error(text)


def _log_warning(logger: AlertLogger, text: str) -> None:
    logger.warning(text)


def _log_info(logger: AlertLogger, text: str) -> None:
    logger.info(text)


def _log_success(logger: AlertLogger, text: str) -> None:
    logger.success(text)


# Anything not listed, including unrecognized levels, goes to success.
_CHANNELS: dict[AlertLevel, AlertChannel] = {
    AlertLevel.ERROR: _log_error,
    AlertLevel.WARNING: _log_warning,
    AlertLevel.INFO: _log_info,
    AlertLevel.SUCCESS: _log_success,
}


def channel_for(level: AlertLevel | str) -> AlertChannel:
    if isinstance(level, AlertLevel):
        return _CHANNELS[level]
    return _log_success


class AlertHandler:
    """Logs incoming Alerts and raises on error-level ones when configured to."""

    def __init__(self, *, logger: AlertLogger | None, raise_error_alerts: bool) -> None:
        self._logger = logger
        self._raise_error_alerts = raise_error_alerts

    @property
    def raise_error_alerts(self) -> bool:
        return self._raise_error_alerts

    def handle_response(self, response: "TrafficOpsResponse") -> None:
        self.handle(response.alerts, response_code=response.status_code, headers=response.headers)

    def handle(
        self,
        alerts: Iterable[Alert] | object,
        *,
        response_code: int | None = None,
        headers: HeadersLike | None = None,
    ) -> None:
        collected = parse_alerts(alerts)
        if not collected:
            return

        if self._logger is not None:
            for alert in collected:
                channel_for(alert.level)(self._logger, alert.text)

        if self._raise_error_alerts and any(alert.is_error for alert in collected):
            raise APIError.from_alerts(collected, response_code=response_code, headers=headers)


__all__ = [
    "SUCCESS",
    "ALERT_LOGGER_NAME",
    "CONSOLE_ALERT_LOGGER_NAME",
    "AlertLevel",
    "Alert",
    "parse_alerts",
    "error_texts",
    "AlertLogger",
    "LoggingAlertLogger",
    "console_alert_logger",
    "resolve_alert_logger",
    "AlertChannel",
    "channel_for",
    "AlertHandler",
]
