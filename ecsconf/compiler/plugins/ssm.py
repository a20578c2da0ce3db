"""Built-in ``ssm`` plugin: SSM Parameter Store lookups.

Template usage::

    "{{ ssm('/myapp/db/host') }}"
    "{{ ssm('/myapp/subnets', 1) }}"     # element of a StringList

Jsonnet usage::

    std.native('ssm')('/myapp/db/host')
    std.native('ssm_list')('/myapp/subnets', 1)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ecsconf.compiler.plugins.base import AWSFunctionPlugin
from ecsconf.kernel.config.models import ConfigPlugin
from ecsconf.kernel.functions import NativeFunction


class SSMPlugin(AWSFunctionPlugin):
    service_name = "ssm"

    def __init__(self, declaration: ConfigPlugin) -> None:
        super().__init__(declaration)
        self._parameters: dict[str, dict[str, Any]] = {}

    def template_funcs(self) -> dict[str, Callable[..., Any]]:
        return {"ssm": self.lookup}

    def native_functions(self) -> list[NativeFunction]:
        return [
            NativeFunction("ssm", ("name",), self.lookup),
            NativeFunction("ssm_list", ("name", "index"), self.lookup),
        ]

    def lookup(self, name: str, index: int | None = None) -> str:
        """Return a parameter value, decrypting SecureString parameters."""
        parameter = self._parameter(name)
        if parameter["Type"] != "StringList":
            if index is not None:
                raise ValueError(f"ssm parameter {name} is not a StringList")
            return parameter["Value"]
        if index is None:
            raise ValueError(f"ssm parameter {name} is a StringList, an index is required")
        values = parameter["Value"].split(",")
        return values[int(index)]

    def _parameter(self, name: str) -> dict[str, Any]:
        if name not in self._parameters:
            response = self.client.get_parameter(Name=name, WithDecryption=True)
            self._parameters[name] = response["Parameter"]
        return self._parameters[name]
