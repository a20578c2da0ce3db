"""Tests for the secretsmanager plugin."""

from __future__ import annotations

from unittest.mock import MagicMock

from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.plugins.secretsmanager import SecretsManagerPlugin
from ecsconf.kernel.config.models import Config, ConfigPlugin

ARN = "arn:aws:secretsmanager:us-east-1:123456789012:secret:app/db-AbCdEf"


class TestSecretsManagerPlugin:
    def test_arn(
        self, context: LoadContext, config: Config, client: MagicMock, aws_session: MagicMock
    ) -> None:
        client.describe_secret.return_value = {"ARN": ARN, "Name": "app/db"}
        SecretsManagerPlugin(ConfigPlugin(name="secretsmanager")).setup(context, config)

        arn = config.template_funcs[0]["secretsmanager_arn"]
        assert arn("app/db") == ARN
        assert arn("app/db") == ARN
        aws_session.client.assert_called_once_with("secretsmanager")
        client.describe_secret.assert_called_once_with(SecretId="app/db")

    def test_native_function(
        self, context: LoadContext, config: Config, client: MagicMock
    ) -> None:
        client.describe_secret.return_value = {"ARN": ARN}
        SecretsManagerPlugin(ConfigPlugin(name="secretsmanager")).setup(context, config)
        (native,) = config.jsonnet_native_funcs
        assert native.name == "secretsmanager_arn"
        assert native.params == ("name",)
        assert native.func("app/db") == ARN
