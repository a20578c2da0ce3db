"""Loguru setup for ecsconf.

Modules log through a bound logger::

    from ecsconf.kernel.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Loading configuration from {path}", path="ecspresso.yml")

The first ``get_logger`` call installs a default stderr sink whose level and
format come from ``ECSCONF_LOG_LEVEL`` and ``ECSCONF_LOG_FORMAT``. The CLI
calls :func:`configure_logging` explicitly from its ``--log-level`` option.
"""

import os
import sys
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

_CURRENT_CONFIG: dict[str, Any] | None = None
_HANDLER_IDS: list[int] = []


def _stderr_sink(format: LogFormat, use_color: bool, include_timestamp: bool) -> dict[str, Any]:
    """Return ``logger.add`` keyword arguments for the stderr sink."""
    if format == "rich":
        handler = RichHandler(
            console=Console(stderr=True),
            markup=False,
            rich_tracebacks=True,
            show_path=False,
            show_time=include_timestamp,
        )
        return {"sink": handler, "format": "{message}"}

    if format == "json":
        return {"sink": sys.stderr, "serialize": True}

    stamp = "{time:YYYY-MM-DD HH:mm:ss} " if include_timestamp else ""
    if format == "console":
        return {
            "sink": sys.stderr,
            "format": stamp + "{level: <8} | {name} | {message}",
            "colorize": False,
        }

    colorize = use_color and sys.stderr.isatty()
    if colorize:
        layout = (
            f"<green>{stamp}</green><level>{{level: <8}}</level> "
            "<cyan>{name}:{line}</cyan> | {message}"
        )
    else:
        layout = stamp + "{level: <8} {name}:{line} | {message}"
    return {"sink": sys.stderr, "format": layout, "colorize": colorize}


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
) -> None:
    """Install the ecsconf log sinks.

    Repeated calls with unchanged settings do nothing.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum level written by every sink
    format : LogFormat, default="structured"
        ``console`` (plain), ``structured`` (colored when stderr is a
        terminal), ``json`` (one object per line) or ``rich``
    output_file : str | Path | None, default=None
        Also append JSON lines to this file
    use_color : bool, default=True
        Allow ANSI colors in the ``structured`` format
    include_timestamp : bool, default=True
        Prefix records with the time
    force_reconfigure : bool, default=False
        Replace the sinks even when the settings are unchanged
    """
    global _CURRENT_CONFIG

    settings = {
        "level": level,
        "format": format,
        "output_file": str(output_file) if output_file else None,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
    }
    if settings == _CURRENT_CONFIG and not force_reconfigure:
        return

    if _CURRENT_CONFIG is None:
        # loguru's default sink would print every record twice
        with suppress(ValueError):
            logger.remove(0)
    while _HANDLER_IDS:
        with suppress(ValueError):
            logger.remove(_HANDLER_IDS.pop())

    _HANDLER_IDS.append(
        logger.add(level=level, **_stderr_sink(format, use_color, include_timestamp))
    )
    if output_file:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _HANDLER_IDS.append(logger.add(path, level=level, serialize=True))

    _CURRENT_CONFIG = settings


@lru_cache(maxsize=256)
def get_logger(name: str) -> "Logger":
    """Return the shared logger bound with ``module=name``."""
    if _CURRENT_CONFIG is None:
        configure_logging(
            level=os.getenv("ECSCONF_LOG_LEVEL", "INFO").upper(),  # type: ignore[arg-type]
            format=os.getenv("ECSCONF_LOG_FORMAT", "structured").lower(),  # type: ignore[arg-type]
        )
    return logger.bind(module=name)
