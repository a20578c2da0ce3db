"""Environment variable handling for document reading.

Two mechanisms are provided:

- :func:`overlay_environ` builds an explicit, read-only view of the process
  environment with extra variables layered on top. ``${VAR}`` substitution
  and the ``env``/``must_env`` functions read this view and never touch
  ``os.environ``.
- :func:`extra_env_set` / :func:`with_extra_env_set` install extra
  variables into ``os.environ`` for the duration of a block and restore the
  previous values on every exit path. This is only needed around code that
  reads the process environment directly, such as plugin-registered
  functions.

The guarded form mutates process-wide state: callers must not run two
overlays with overlapping keys concurrently on different threads.
"""

from __future__ import annotations

import os
import re
from collections import ChainMap
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import TypeVar

from ecsconf.kernel.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# ${VAR} or ${VAR:default}; a doubled $$ escapes the reference
ENV_VAR_PATTERN = re.compile(r"\$(\$?)\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


class UndefinedVariableError(LookupError):
    """Raised when a required environment variable is not set."""

    def __init__(self, name: str) -> None:
        super().__init__(f"environment variable {name} is not defined")
        self.name = name


def overlay_environ(
    extra_env: Mapping[str, str] | None,
    base: Mapping[str, str] | None = None,
) -> Mapping[str, str]:
    """Return ``extra_env`` layered over ``base`` (``os.environ`` by default)."""
    base = os.environ if base is None else base
    if not extra_env:
        return base
    return ChainMap(dict(extra_env), base)  # type: ignore[arg-type]


@contextmanager
def extra_env_set(extra_env: Mapping[str, str] | None) -> Iterator[None]:
    """Temporarily install ``extra_env`` into ``os.environ``.

    Every key is restored on exit to its previous value, or removed if it
    was previously unset, whether the block returns or raises.

    Examples
    --------
    >>> with extra_env_set({"APP_STAGE": "dev"}):
    ...     os.environ["APP_STAGE"]
    'dev'
    """
    if not extra_env:
        yield
        return

    previous: dict[str, str | None] = {key: os.environ.get(key) for key in extra_env}
    logger.debug("Setting extra environment variables: {keys}", keys=sorted(extra_env))
    try:
        for key, value in extra_env.items():
            os.environ[key] = value
        yield
    finally:
        for key, old in previous.items():
            if old is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = old


def with_extra_env_set(extra_env: Mapping[str, str] | None, operation: Callable[[], T]) -> T:
    """Run ``operation`` with ``extra_env`` installed, then restore the environment."""
    with extra_env_set(extra_env):
        return operation()


def substitute_env_vars(text: str, environ: Mapping[str, str]) -> str:
    """Replace ``${VAR}`` and ``${VAR:default}`` references in ``text``.

    Raises
    ------
    UndefinedVariableError
        If a referenced variable is unset and has no default
    """

    def replacer(match: re.Match[str]) -> str:
        escaped, name, default = match.group(1), match.group(2), match.group(3)
        if escaped:
            return match.group(0)[1:]
        value = environ.get(name)
        if value is not None:
            return value
        if default is not None:
            return default
        raise UndefinedVariableError(name)

    return ENV_VAR_PATTERN.sub(replacer, text)


def env_function(environ: Mapping[str, str]) -> Callable[..., str]:
    """Build ``env(name, default="")`` bound to ``environ``."""

    def env(name: str, default: str = "") -> str:
        return environ.get(name, default)

    return env


def must_env_function(environ: Mapping[str, str]) -> Callable[[str], str]:
    """Build ``must_env(name)`` bound to ``environ``."""

    def must_env(name: str) -> str:
        value = environ.get(name)
        if value is None:
            raise UndefinedVariableError(name)
        return value

    return must_env
