"""Shared pytest fixtures for ecsconf tests.

- _isolate_aws_env: keeps the developer's AWS settings out of every test
- aws_session / session_factory: stand-ins for boto3 so nothing hits AWS
- loader: a ConfigLoader wired to the stub session factory
- log_capture: records loguru messages
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from loguru import logger

from ecsconf.compiler.config_loader import ConfigLoader


@pytest.fixture(autouse=True)
def _isolate_aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AWS_PROFILE", "AWS_REGION", "AWS_DEFAULT_REGION", "AWS_ROLE_ARN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def aws_session() -> MagicMock:
    session = MagicMock(name="Session")
    session.region_name = "us-east-1"
    return session


@pytest.fixture
def session_factory(aws_session: MagicMock) -> MagicMock:
    return MagicMock(name="session_factory", return_value=aws_session)


@pytest.fixture
def loader(session_factory: MagicMock) -> ConfigLoader:
    return ConfigLoader(session_factory=session_factory)


@pytest.fixture
def log_capture() -> Iterator[list[dict[str, Any]]]:
    """Capture loguru records as ``{"level", "message"}`` dicts."""
    captured: list[dict[str, Any]] = []

    def sink(message: Any) -> None:
        record = message.record
        captured.append({"level": record["level"].name, "message": record["message"]})

    handler_id = logger.add(sink, level="DEBUG", format="{message}")
    yield captured
    logger.remove(handler_id)
