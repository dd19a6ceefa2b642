from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from tests.shared.transport import RecordingAlertLogger, build_config  # noqa: E402


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def alert_logger() -> RecordingAlertLogger:
    return RecordingAlertLogger()
