"""Built-in ``secretsmanager`` plugin: resolve secret names to ARNs.

Task definitions reference secrets by full ARN, including the random
suffix Secrets Manager appends. ``secretsmanager_arn`` looks it up::

    "valueFrom": "{{ secretsmanager_arn('myapp/db-password') }}"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ecsconf.compiler.plugins.base import AWSFunctionPlugin
from ecsconf.kernel.config.models import ConfigPlugin
from ecsconf.kernel.functions import NativeFunction


class SecretsManagerPlugin(AWSFunctionPlugin):
    service_name = "secretsmanager"

    def __init__(self, declaration: ConfigPlugin) -> None:
        super().__init__(declaration)
        self._arns: dict[str, str] = {}

    def template_funcs(self) -> dict[str, Callable[..., Any]]:
        return {"secretsmanager_arn": self.arn}

    def native_functions(self) -> list[NativeFunction]:
        return [NativeFunction("secretsmanager_arn", ("name",), self.arn)]

    def arn(self, name: str) -> str:
        if name not in self._arns:
            self._arns[name] = self.client.describe_secret(SecretId=name)["ARN"]
        return self._arns[name]
