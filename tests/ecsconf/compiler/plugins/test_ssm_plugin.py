"""Tests for the ssm plugin."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.plugins.ssm import SSMPlugin
from ecsconf.compiler.preprocessing.jsonnet import JsonnetEngine
from ecsconf.kernel.config.models import Config, ConfigPlugin


def parameter(type_: str, value: str) -> dict:
    return {"Parameter": {"Name": "/p", "Type": type_, "Value": value}}


@pytest.fixture
def plugin(context: LoadContext, config: Config) -> SSMPlugin:
    plugin = SSMPlugin(ConfigPlugin(name="ssm"))
    plugin.setup(context, config)
    return plugin


class TestSetup:
    def test_registers_functions(self, plugin: SSMPlugin, config: Config) -> None:
        assert list(config.template_funcs[0]) == ["ssm"]
        assert [fn.name for fn in config.jsonnet_native_funcs] == ["ssm", "ssm_list"]

    def test_prefix(self, context: LoadContext, config: Config) -> None:
        SSMPlugin(ConfigPlugin(name="ssm", func_prefix="prod_")).setup(context, config)
        assert list(config.template_funcs[0]) == ["prod_ssm"]
        assert [fn.name for fn in config.jsonnet_native_funcs] == ["prod_ssm", "prod_ssm_list"]

    def test_no_client_until_called(self, plugin: SSMPlugin, aws_session: MagicMock) -> None:
        aws_session.client.assert_not_called()


class TestLookup:
    def test_string(
        self, plugin: SSMPlugin, config: Config, client: MagicMock, aws_session: MagicMock
    ) -> None:
        client.get_parameter.return_value = parameter("String", "nginx:latest")
        assert config.template_funcs[0]["ssm"]("/app/image") == "nginx:latest"
        aws_session.client.assert_called_once_with("ssm")
        client.get_parameter.assert_called_once_with(Name="/app/image", WithDecryption=True)

    def test_cached(self, plugin: SSMPlugin, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("SecureString", "s3cr3t")
        assert plugin.lookup("/app/password") == "s3cr3t"
        assert plugin.lookup("/app/password") == "s3cr3t"
        assert client.get_parameter.call_count == 1

    def test_string_list(self, plugin: SSMPlugin, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("StringList", "subnet-a,subnet-b")
        assert plugin.lookup("/app/subnets", 1) == "subnet-b"
        # jsonnet numbers arrive as floats
        assert plugin.lookup("/app/subnets", 0.0) == "subnet-a"

    def test_string_list_requires_index(self, plugin: SSMPlugin, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("StringList", "a,b")
        with pytest.raises(ValueError):
            plugin.lookup("/app/subnets")

    def test_index_on_plain_string(self, plugin: SSMPlugin, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("String", "a")
        with pytest.raises(ValueError):
            plugin.lookup("/app/image", 0)

    def test_not_set_up(self) -> None:
        with pytest.raises(RuntimeError):
            SSMPlugin(ConfigPlugin(name="ssm")).lookup("/app/image")


class TestJsonnet:
    def test_ssm_list_native(self, plugin: SSMPlugin, config: Config, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("StringList", "subnet-a,subnet-b")
        engine = JsonnetEngine(native_functions=config.jsonnet_native_funcs)
        source = "{ subnet: std.native('ssm_list')('/app/subnets', 1) }"
        result = engine.evaluate_snippet("task.jsonnet", source)
        assert json.loads(result) == {"subnet": "subnet-b"}

    def test_ssm_native(self, plugin: SSMPlugin, config: Config, client: MagicMock) -> None:
        client.get_parameter.return_value = parameter("String", "nginx:latest")
        engine = JsonnetEngine(native_functions=config.jsonnet_native_funcs)
        result = engine.evaluate_snippet("task.jsonnet", "{ image: std.native('ssm')('/app/image') }")
        assert json.loads(result) == {"image": "nginx:latest"}
