"""Config plugins: registry and built-in implementations."""

from ecsconf.compiler.plugins.base import AWSFunctionPlugin
from ecsconf.compiler.plugins.cloudformation import CloudFormationPlugin
from ecsconf.compiler.plugins.registry import (
    ENTRY_POINT_GROUP,
    ConfigPluginProtocol,
    PluginFactory,
    PluginRegistry,
)
from ecsconf.compiler.plugins.secretsmanager import SecretsManagerPlugin
from ecsconf.compiler.plugins.ssm import SSMPlugin

# Always set up, before any plugin the config declares
DEFAULT_PLUGIN_NAMES: tuple[str, ...] = ("ssm", "secretsmanager")


def default_registry() -> PluginRegistry:
    """Return a new registry holding the built-in plugins."""
    registry = PluginRegistry()
    registry.register("ssm", SSMPlugin)
    registry.register("secretsmanager", SecretsManagerPlugin)
    registry.register("cloudformation", CloudFormationPlugin)
    return registry


__all__ = [
    "AWSFunctionPlugin",
    "CloudFormationPlugin",
    "ConfigPluginProtocol",
    "DEFAULT_PLUGIN_NAMES",
    "ENTRY_POINT_GROUP",
    "PluginFactory",
    "PluginRegistry",
    "SSMPlugin",
    "SecretsManagerPlugin",
    "default_registry",
]
