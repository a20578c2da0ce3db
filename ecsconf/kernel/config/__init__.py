"""Configuration data models for ecsconf."""

from ecsconf.kernel.config.duration import Duration
from ecsconf.kernel.config.models import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_TIMEOUT,
    CLIOptions,
    Config,
    ConfigCodeDeploy,
    ConfigIgnore,
    ConfigPlugin,
    ConfigRuntime,
    DictTags,
    HasTags,
    new_default_config,
)

__all__ = [
    "CLIOptions",
    "Config",
    "ConfigCodeDeploy",
    "ConfigIgnore",
    "ConfigPlugin",
    "ConfigRuntime",
    "DEFAULT_CLUSTER_NAME",
    "DEFAULT_TIMEOUT",
    "DictTags",
    "Duration",
    "HasTags",
    "new_default_config",
]
