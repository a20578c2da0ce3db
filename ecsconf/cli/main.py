"""ecsconf CLI - Main entrypoint."""

import typer
from rich.console import Console

import ecsconf
from ecsconf.cli.commands import config_cmd
from ecsconf.kernel.logging import configure_logging

app = typer.Typer(
    name="ecsconf",
    help="Resolve ECS deployment configs: templates, jsonnet and AWS lookups.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command("render")(config_cmd.render)
app.command("validate")(config_cmd.validate)

_LOG_LEVELS = {"trace", "debug", "info", "warning", "error", "critical"}
_LOG_FORMATS = {"console", "json", "structured", "rich"}


def _version_callback(value: bool) -> None:
    if value:
        console.print(
            f"[bold blue]ecsconf[/bold blue] version [green]{ecsconf.__version__}[/green]"
        )
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Log level: debug|info|warning|error",
        envvar="ECSCONF_LOG_LEVEL",
    ),
    log_format: str = typer.Option(
        "rich", "--log-format", help="Log format: console|json|structured|rich"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    """ecsconf CLI.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    level = log_level.lower()
    if level == "warn":
        level = "warning"
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    if log_format not in _LOG_FORMATS:
        raise typer.BadParameter(f"unknown log format {log_format!r}", param_hint="--log-format")

    configure_logging(level=level.upper(), format=log_format)  # type: ignore[arg-type]

    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj.update({"log_level": level, "log_format": log_format})


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
