"""Base class for plugins that expose AWS lookups as document functions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from ecsconf.kernel.config.models import Config, ConfigPlugin
from ecsconf.kernel.functions import NativeFunction, prefixed
from ecsconf.kernel.logging import get_logger

if TYPE_CHECKING:
    from ecsconf.compiler.context import LoadContext

logger = get_logger(__name__)


class AWSFunctionPlugin:
    """Register template and jsonnet functions backed by one AWS service.

    Setup only registers the functions. The AWS client is created on the
    first call, from the config's session at that time, so an
    ``assume_role`` done after load is honored.
    """

    service_name: ClassVar[str]

    def __init__(self, declaration: ConfigPlugin) -> None:
        self.declaration = declaration
        self._config: Config | None = None
        self._client: Any = None

    def setup(self, context: LoadContext, config: Config) -> None:
        self._config = config
        prefix = self.declaration.func_prefix
        config.add_template_funcs(prefixed(self.template_funcs(), prefix))
        config.add_jsonnet_native_funcs(
            *(fn.with_prefix(prefix) for fn in self.native_functions())
        )
        logger.debug(
            "Plugin {name} registered functions with prefix {prefix!r}",
            name=self.declaration.name,
            prefix=prefix,
        )

    def template_funcs(self) -> dict[str, Callable[..., Any]]:
        raise NotImplementedError

    def native_functions(self) -> list[NativeFunction]:
        raise NotImplementedError

    @property
    def client(self) -> Any:
        if self._client is None:
            session = self._config.aws_session if self._config is not None else None
            if session is None:
                raise RuntimeError(
                    f"plugin {self.declaration.name} is not set up with an AWS session"
                )
            self._client = session.client(self.service_name)
        return self._client
