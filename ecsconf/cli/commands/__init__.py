"""ecsconf CLI commands."""

from ecsconf.cli.commands import config_cmd

__all__ = ["config_cmd"]
