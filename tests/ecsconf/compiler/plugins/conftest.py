"""Fixtures for built-in AWS plugin tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.plugins.registry import PluginRegistry
from ecsconf.kernel.config.models import Config


@pytest.fixture
def config(aws_session: MagicMock) -> Config:
    config = Config(region="us-east-1")
    config.runtime.aws_session = aws_session
    return config


@pytest.fixture
def context(session_factory: MagicMock) -> LoadContext:
    return LoadContext(
        session_factory=session_factory,
        plugin_registry=PluginRegistry(discover_entry_points=False),
    )


@pytest.fixture
def client(aws_session: MagicMock) -> MagicMock:
    return aws_session.client.return_value
