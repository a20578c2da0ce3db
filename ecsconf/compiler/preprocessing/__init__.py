"""Document preprocessing: environment overlay, Jinja2 rendering, jsonnet evaluation."""

from ecsconf.compiler.preprocessing.env_vars import (
    extra_env_set,
    overlay_environ,
    substitute_env_vars,
    with_extra_env_set,
)
from ecsconf.compiler.preprocessing.jsonnet import JsonnetEngine, default_native_functions
from ecsconf.compiler.preprocessing.template import TemplateRenderer

__all__ = [
    "JsonnetEngine",
    "TemplateRenderer",
    "default_native_functions",
    "extra_env_set",
    "overlay_environ",
    "substitute_env_vars",
    "with_extra_env_set",
]
