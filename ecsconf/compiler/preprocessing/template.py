"""Jinja2 rendering of documents before structural parsing.

Documents can pull values from the environment and from functions that
plugins register::

    region: "{{ must_env('AWS_REGION') }}"
    cluster: "{{ env('CLUSTER', 'default') }}"
    image: "{{ ssm('/myapp/image') }}"

After rendering, ``${VAR}`` references are substituted from the same
environment view (see ``preprocessing/env_vars.py``).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from ecsconf.compiler.preprocessing.env_vars import (
    UndefinedVariableError,
    env_function,
    must_env_function,
    substitute_env_vars,
)
from ecsconf.kernel.exceptions import ReadError


class TemplateRenderer:
    """Render document text with env helpers and registered functions."""

    def __init__(self) -> None:
        # Sandboxed so rendering a config file cannot run arbitrary code
        self.env = SandboxedEnvironment(
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.funcs: dict[str, Callable[..., Any]] = {}

    def add_funcs(self, funcs: Mapping[str, Callable[..., Any]]) -> None:
        """Register functions; a later registration replaces an earlier one."""
        self.funcs.update(funcs)

    def render(self, text: str, environ: Mapping[str, str], source: str = "<bytes>") -> str:
        """Render ``text`` and substitute ``${VAR}`` references.

        Parameters
        ----------
        text : str
            Document text
        environ : Mapping[str, str]
            Environment view for ``env``, ``must_env`` and ``${VAR}``
        source : str
            Name used in error messages

        Raises
        ------
        ReadError
            On template syntax errors, undefined names, unset variables, or
            an exception raised by a registered function
        """
        context: dict[str, Any] = {
            "env": env_function(environ),
            "must_env": must_env_function(environ),
            **self.funcs,
        }
        try:
            if "{{" in text or "{%" in text:
                text = self.env.from_string(text).render(context)
            return substitute_env_vars(text, environ)
        except TemplateError as e:
            raise ReadError(source, f"template rendering failed: {e}") from e
        except UndefinedVariableError as e:
            raise ReadError(source, str(e)) from e
        except Exception as e:
            raise ReadError(source, f"template function failed: {type(e).__name__}: {e}") from e
