"""Config compilation: dialect dispatch, preprocessing, normalization and plugins."""

from ecsconf.compiler.config_loader import ConfigLoader, load_config, unmarshal_config
from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.dialect import Dialect
from ecsconf.compiler.normalizer import ConfigNormalizer, resolve_definition_path

__all__ = [
    "ConfigLoader",
    "ConfigNormalizer",
    "Dialect",
    "LoadContext",
    "load_config",
    "resolve_definition_path",
    "unmarshal_config",
]
