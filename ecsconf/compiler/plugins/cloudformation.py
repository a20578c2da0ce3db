"""``cloudformation`` plugin: read stack outputs and exports.

Declared explicitly in the config::

    plugins:
      - name: cloudformation

Then::

    "{{ cfn_output('network-stack', 'PrivateSubnet1') }}"
    "{{ cfn_export('network-VpcId') }}"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ecsconf.compiler.plugins.base import AWSFunctionPlugin
from ecsconf.kernel.config.models import ConfigPlugin
from ecsconf.kernel.functions import NativeFunction


class CloudFormationPlugin(AWSFunctionPlugin):
    service_name = "cloudformation"

    def __init__(self, declaration: ConfigPlugin) -> None:
        super().__init__(declaration)
        self._outputs: dict[str, dict[str, str]] = {}
        self._exports: dict[str, str] | None = None

    def template_funcs(self) -> dict[str, Callable[..., Any]]:
        return {"cfn_output": self.output, "cfn_export": self.export}

    def native_functions(self) -> list[NativeFunction]:
        return [
            NativeFunction("cfn_output", ("stack", "key"), self.output),
            NativeFunction("cfn_export", ("name",), self.export),
        ]

    def output(self, stack: str, key: str) -> str:
        if stack not in self._outputs:
            stacks = self.client.describe_stacks(StackName=stack)["Stacks"]
            self._outputs[stack] = {
                o["OutputKey"]: o["OutputValue"] for o in stacks[0].get("Outputs", [])
            }
        try:
            return self._outputs[stack][key]
        except KeyError:
            raise LookupError(f"output {key} is not found in stack {stack}") from None

    def export(self, name: str) -> str:
        if self._exports is None:
            exports: dict[str, str] = {}
            for page in self.client.get_paginator("list_exports").paginate():
                for export in page.get("Exports", []):
                    exports[export["Name"]] = export["Value"]
            self._exports = exports
        try:
            return self._exports[name]
        except KeyError:
            raise LookupError(f"export {name} is not found") from None
