"""Config plugin registry.

A plugin is anything with a ``setup(context, config)`` method. The registry
maps a plugin name to a factory that builds the plugin from its
declaration::

    plugins:
      - name: tfstate
        func_prefix: network_
        config:
          url: s3://my-bucket/terraform.tfstate

Built-in plugins are registered on import of ``ecsconf.compiler.plugins``.
Third-party plugins are found through the ``ecsconf.plugins`` entry-point
group, loaded lazily the first time an unknown name is requested::

    [project.entry-points."ecsconf.plugins"]
    tfstate = "ecsconf_tfstate:TFStatePlugin"
"""

from __future__ import annotations

from collections.abc import Callable
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Protocol

from ecsconf.kernel.config.models import Config, ConfigPlugin
from ecsconf.kernel.exceptions import PluginSetupError
from ecsconf.kernel.logging import get_logger

if TYPE_CHECKING:
    from ecsconf.compiler.context import LoadContext

logger = get_logger(__name__)

ENTRY_POINT_GROUP = "ecsconf.plugins"


class ConfigPluginProtocol(Protocol):
    """Capability every config plugin exposes."""

    def setup(self, context: LoadContext, config: Config) -> None:
        """Inspect and mutate ``config`` in place; raise on failure."""
        ...


PluginFactory = Callable[[ConfigPlugin], ConfigPluginProtocol]


class PluginRegistry:
    """Name -> factory mapping for config plugins.

    Names are case-insensitive.
    """

    def __init__(self, discover_entry_points: bool = True) -> None:
        self._factories: dict[str, PluginFactory] = {}
        self._discover = discover_entry_points
        self._discovered = False

    def register(self, name: str, factory: PluginFactory, *, replace: bool = False) -> None:
        key = name.lower()
        if key in self._factories and not replace:
            raise ValueError(f"plugin {name!r} is already registered")
        self._factories[key] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name.lower(), None)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def copy(self) -> PluginRegistry:
        clone = PluginRegistry(discover_entry_points=self._discover)
        clone._factories = dict(self._factories)
        clone._discovered = self._discovered
        return clone

    def create(self, declaration: ConfigPlugin) -> ConfigPluginProtocol:
        """Build the plugin named by ``declaration``.

        Raises
        ------
        PluginSetupError
            If no plugin of that name is registered or discoverable
        """
        key = declaration.name.lower()
        if key not in self._factories:
            self._load_entry_points()
        factory = self._factories.get(key)
        if factory is None:
            raise PluginSetupError(
                declaration.name, f"plugin {declaration.name} is not available"
            )
        return factory(declaration)

    def _load_entry_points(self) -> None:
        if not self._discover or self._discovered:
            return
        self._discovered = True
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            key = ep.name.lower()
            if key in self._factories:
                continue
            try:
                self._factories[key] = ep.load()
            except ImportError as e:
                logger.warning(
                    "Plugin {name} from {value} could not be imported: {error}",
                    name=ep.name,
                    value=ep.value,
                    error=e,
                )
            else:
                logger.debug("Discovered plugin {name} from {value}", name=ep.name, value=ep.value)
