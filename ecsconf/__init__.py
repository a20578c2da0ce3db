"""ecsconf - configuration resolution for ECS service deployments.

Loads a YAML, JSON or jsonnet service definition config, renders it against
the process environment and AWS-backed plugin functions, and returns a
normalized :class:`~ecsconf.kernel.config.Config`.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ecsconf")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

from ecsconf.compiler import ConfigLoader, Dialect, LoadContext, load_config
from ecsconf.kernel.config import (
    CLIOptions,
    Config,
    ConfigCodeDeploy,
    ConfigIgnore,
    ConfigPlugin,
    Duration,
    new_default_config,
)
from ecsconf.kernel.exceptions import ConfigError, EcsconfError
from ecsconf.kernel.versioning import VersionConstraints

__all__ = [
    "CLIOptions",
    "Config",
    "ConfigCodeDeploy",
    "ConfigError",
    "ConfigIgnore",
    "ConfigLoader",
    "ConfigPlugin",
    "Dialect",
    "Duration",
    "EcsconfError",
    "LoadContext",
    "VersionConstraints",
    "__version__",
    "load_config",
    "new_default_config",
]
