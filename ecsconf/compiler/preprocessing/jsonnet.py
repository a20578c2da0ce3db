"""Jsonnet evaluation of config and definition documents.

External variables are injected as strings (``ext_str``) or as jsonnet code
(``ext_code``). Native functions are reached from jsonnet code with
``std.native(name)``::

    local must_env = std.native('must_env');
    {
      region: must_env('AWS_REGION'),
      cluster: std.extVar('cluster'),
    }
"""

from __future__ import annotations

import string
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import _jsonnet

from ecsconf.compiler.preprocessing.env_vars import (
    env_function,
    must_env_function,
    overlay_environ,
    with_extra_env_set,
)
from ecsconf.kernel.exceptions import TemplateEvaluationError
from ecsconf.kernel.functions import NativeFunction
from ecsconf.kernel.logging import get_logger

logger = get_logger(__name__)


def default_native_functions(environ: Mapping[str, str]) -> list[NativeFunction]:
    """Built-in natives bound to ``environ``: ``env(name, default)`` and ``must_env(name)``."""
    return [
        NativeFunction("env", ("name", "default"), env_function(environ)),
        NativeFunction("must_env", ("name",), must_env_function(environ)),
    ]


def binding_params(fn: NativeFunction) -> tuple[str, ...]:
    """Parameter names handed to the jsonnet VM for ``fn``.

    Natives are called positionally, so only the arity matters. The
    ``_jsonnet`` binding (0.21 and later) keeps pointers into temporary
    UTF-8 buffers for multi-character names, and two such names then bind
    as the same parameter. One-letter names do not have that problem.
    """
    if len(fn.params) > len(string.ascii_lowercase):
        raise ValueError(f"native function {fn.name} takes too many parameters")
    return tuple(string.ascii_lowercase[: len(fn.params)])


class JsonnetEngine:
    """Evaluate jsonnet to JSON text with injected variables and natives."""

    def __init__(
        self,
        ext_str: Mapping[str, str] | None = None,
        ext_code: Mapping[str, str] | None = None,
        native_functions: Iterable[NativeFunction] = (),
    ) -> None:
        self.ext_str = dict(ext_str or {})
        self.ext_code = dict(ext_code or {})
        self._natives: dict[str, NativeFunction] = {}
        for fn in native_functions:
            self.add_native_function(fn)

    def add_native_function(self, fn: NativeFunction) -> None:
        self._natives[fn.name] = fn

    @property
    def native_function_names(self) -> list[str]:
        return sorted(self._natives)

    def evaluate_file(
        self, path: str | Path, extra_env: Mapping[str, str] | None = None
    ) -> str:
        """Evaluate a jsonnet (or JSON) file and return JSON text.

        Raises
        ------
        TemplateEvaluationError
            If evaluation fails for any reason
        """
        filename = str(path)
        logger.debug("Evaluating jsonnet file {path}", path=filename)
        return self._evaluate(
            filename,
            extra_env,
            lambda callbacks: _jsonnet.evaluate_file(
                filename,
                ext_vars=self.ext_str,
                ext_codes=self.ext_code,
                native_callbacks=callbacks,
            ),
        )

    def evaluate_snippet(
        self,
        filename: str,
        source: str,
        extra_env: Mapping[str, str] | None = None,
    ) -> str:
        """Evaluate jsonnet source text; ``filename`` resolves relative imports."""
        return self._evaluate(
            filename,
            extra_env,
            lambda callbacks: _jsonnet.evaluate_snippet(
                filename,
                source,
                ext_vars=self.ext_str,
                ext_codes=self.ext_code,
                native_callbacks=callbacks,
            ),
        )

    def _evaluate(
        self,
        filename: str,
        extra_env: Mapping[str, str] | None,
        run: Callable[[dict[str, Any]], str],
    ) -> str:
        callbacks = self._native_callbacks(overlay_environ(extra_env))
        try:
            # Registered natives may read os.environ themselves
            result: str = with_extra_env_set(extra_env, lambda: run(callbacks))
        except RuntimeError as e:
            raise TemplateEvaluationError(filename, str(e).strip()) from e
        return result

    def _native_callbacks(
        self, environ: Mapping[str, str]
    ) -> dict[str, tuple[tuple[str, ...], Any]]:
        natives = {fn.name: fn for fn in default_native_functions(environ)}
        natives.update(self._natives)
        return {name: (binding_params(fn), fn.func) for name, fn in natives.items()}
