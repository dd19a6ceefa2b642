from __future__ import annotations

import logging

import httpx
import pytest

from trafficops_client.core.alerts import (
    ALERT_LOGGER_NAME,
    CONSOLE_ALERT_LOGGER_NAME,
    SUCCESS,
    Alert,
    AlertHandler,
    AlertLevel,
    LoggingAlertLogger,
    parse_alerts,
    resolve_alert_logger,
)
from trafficops_client.core.errors import APIError
from trafficops_client.core.models import TrafficOpsResponse


def _response(payload: object, status_code: int = 200) -> TrafficOpsResponse:
    return TrafficOpsResponse(
        status_code=status_code,
        reason_phrase="OK",
        headers=httpx.Headers({"X-Request": "7"}),
        data=payload,
    )


def test_alert_level_is_parsed_case_insensitively():
    assert AlertLevel.parse("ERROR") is AlertLevel.ERROR
    assert AlertLevel.parse("warning") is AlertLevel.WARNING
    assert AlertLevel.parse("critical") == "critical"


def test_parse_alerts_skips_non_objects():
    alerts = parse_alerts([{"level": "info", "text": "a"}, "junk", 3, {"level": "error"}])
    assert alerts == (Alert(AlertLevel.INFO, "a"), Alert(AlertLevel.ERROR, ""))
    assert parse_alerts(None) == ()
    assert parse_alerts("error") == ()


def test_scenario_error_alert_raises_with_text():
    handler = AlertHandler(logger=None, raise_error_alerts=True)
    payload = {"response": {}, "alerts": [{"level": "ERROR", "text": "bad name"}]}
    with pytest.raises(APIError) as excinfo:
        handler.handle_response(_response(payload, status_code=400))
    assert str(excinfo.value) == "bad name"
    assert excinfo.value.response_code == 400
    assert excinfo.value.headers["x-request"] == "7"


def test_empty_alerts_are_a_silent_no_op(alert_logger):
    handler = AlertHandler(logger=alert_logger, raise_error_alerts=True)
    handler.handle_response(_response({"response": [], "alerts": []}))
    handler.handle([])
    handler.handle(None)
    assert alert_logger.records == []


@pytest.mark.parametrize("raise_error_alerts", [True, False])
def test_alerts_without_errors_never_raise(raise_error_alerts, alert_logger):
    handler = AlertHandler(logger=alert_logger, raise_error_alerts=raise_error_alerts)
    handler.handle(
        [
            {"level": "success", "text": "created"},
            {"level": "warning", "text": "deprecated"},
            {"level": "info", "text": "fyi"},
        ]
    )
    assert len(alert_logger.records) == 3


def test_error_message_joins_only_error_alerts_in_order():
    handler = AlertHandler(logger=None, raise_error_alerts=True)
    alerts = [
        {"level": "error", "text": "one"},
        {"level": "info", "text": "skip"},
        {"level": "error", "text": "two"},
        {"level": "warning", "text": "skip too"},
        {"level": "error", "text": "three"},
    ]
    with pytest.raises(APIError, match="^one; two; three$"):
        handler.handle(alerts, response_code=409)


def test_error_alerts_are_returned_when_raising_is_disabled(alert_logger):
    handler = AlertHandler(logger=alert_logger, raise_error_alerts=False)
    handler.handle([{"level": "error", "text": "bad"}])
    assert alert_logger.records == [("error", "bad")]


def test_each_level_goes_to_its_channel(alert_logger):
    handler = AlertHandler(logger=alert_logger, raise_error_alerts=False)
    handler.handle(
        [
            {"level": "error", "text": "e"},
            {"level": "warning", "text": "w"},
            {"level": "info", "text": "i"},
            {"level": "success", "text": "s"},
            {"level": "critical", "text": "unknown"},
        ]
    )
    assert alert_logger.records == [
        ("error", "e"),
        ("warning", "w"),
        ("info", "i"),
        ("success", "s"),
        ("success", "unknown"),
    ]


def test_logging_happens_before_raising(alert_logger):
    handler = AlertHandler(logger=alert_logger, raise_error_alerts=True)
    with pytest.raises(APIError):
        handler.handle([{"level": "info", "text": "i"}, {"level": "error", "text": "e"}])
    assert alert_logger.records == [("info", "i"), ("error", "e")]


def test_resolve_alert_logger_falls_back_to_console_logger():
    assert resolve_alert_logger(None, enabled=False) is None
    fallback = resolve_alert_logger(None, enabled=True)
    assert isinstance(fallback, LoggingAlertLogger)
    assert fallback.logger.name == CONSOLE_ALERT_LOGGER_NAME
    assert fallback.logger.propagate is False


def test_console_fallback_prints_every_level_without_logging_config(capsys):
    fallback = resolve_alert_logger(None, enabled=True)
    handler = AlertHandler(logger=fallback, raise_error_alerts=False)
    handler.handle(
        parse_alerts(
            [
                {"level": "info", "text": "INFO-ALERT"},
                {"level": "success", "text": "SUCCESS-ALERT"},
                {"level": "warning", "text": "WARN-ALERT"},
            ]
        ),
        response_code=200,
        headers=None,
    )
    err = capsys.readouterr().err
    assert "INFO: INFO-ALERT" in err
    assert "SUCCESS: SUCCESS-ALERT" in err
    assert "WARNING: WARN-ALERT" in err


def test_console_fallback_does_not_stack_handlers():
    first = resolve_alert_logger(None, enabled=True)
    second = resolve_alert_logger(None, enabled=True)
    assert first.logger is second.logger
    assert len(second.logger.handlers) == 1


def test_resolve_alert_logger_adapts_stdlib_logger(alert_logger):
    custom = logging.getLogger("tests.alerts")
    adapted = resolve_alert_logger(custom, enabled=True)
    assert isinstance(adapted, LoggingAlertLogger)
    assert adapted.logger is custom
    assert resolve_alert_logger(alert_logger, enabled=True) is alert_logger


def test_logging_alert_logger_levels(caplog):
    adapter = LoggingAlertLogger()
    with caplog.at_level(logging.DEBUG, logger=ALERT_LOGGER_NAME):
        adapter.error("e")
        adapter.warning("w")
        adapter.info("i")
        adapter.success("s")
    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.ERROR, "e"),
        (logging.WARNING, "w"),
        (logging.INFO, "i"),
        (SUCCESS, "s"),
    ]
    assert logging.getLevelName(SUCCESS) == "SUCCESS"
