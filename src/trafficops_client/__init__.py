"""Public package exports for the Traffic Ops API client."""

from .async_client import AsyncTrafficOpsClient
from .client import TrafficOpsClient
from .config import APIVersion, TrafficOpsClientConfig, TransportConfig
from .core.alerts import Alert, AlertLevel, AlertLogger, LoggingAlertLogger
from .core.dates import DateKeySpec, InvalidDate
from .core.errors import APIError, ClientError
from .core.login import OAuthLogin, PasswordLogin, TokenLogin
from .core.models import Envelope, PingEnvelope, TrafficOpsResponse, single_response

__all__ = [
    "TrafficOpsClient",
    "AsyncTrafficOpsClient",
    "TrafficOpsClientConfig",
    "TransportConfig",
    "APIVersion",
    "Alert",
    "AlertLevel",
    "AlertLogger",
    "LoggingAlertLogger",
    "DateKeySpec",
    "InvalidDate",
    "APIError",
    "ClientError",
    "TokenLogin",
    "OAuthLogin",
    "PasswordLogin",
    "Envelope",
    "PingEnvelope",
    "TrafficOpsResponse",
    "single_response",
]
