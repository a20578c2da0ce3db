"""``render`` and ``validate`` commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.table import Table

from ecsconf.compiler.config_loader import ConfigLoader
from ecsconf.kernel.config.duration import Duration
from ecsconf.kernel.config.models import CLIOptions, Config
from ecsconf.kernel.exceptions import ConfigError

# Not a semantic version, so required_version is not enforced unless --tool-version is given
CURRENT_VERSION = "current"

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to the config file (.yml, .yaml, .json or .jsonnet)",
        envvar="ECSCONF_CONFIG",
    ),
]
ToolVersionOption = Annotated[
    str,
    typer.Option(
        "--tool-version",
        help="Version checked against required_version",
    ),
]
ExtStrOption = Annotated[
    list[str] | None,
    typer.Option("--ext-str", help="Jsonnet external string variable, KEY=VALUE"),
]
ExtCodeOption = Annotated[
    list[str] | None,
    typer.Option("--ext-code", help="Jsonnet external code variable, KEY=CODE"),
]
TimeoutOption = Annotated[
    str | None,
    typer.Option("--timeout", help="Override the config timeout, e.g. 15m or 1h30m"),
]
FilterCommandOption = Annotated[
    str | None,
    typer.Option("--filter-command", help="Override the config filter_command"),
]


def parse_pairs(values: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` options into a dict."""
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint=option)
        pairs[key] = value
    return pairs


def cli_options(timeout: str | None, filter_command: str | None) -> CLIOptions:
    """Build the post-load overrides from command-line values."""
    options = CLIOptions(filter_command=filter_command or "")
    if timeout:
        try:
            options.timeout = Duration.parse(timeout).duration
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--timeout") from e
    return options


def _load(
    config: Path,
    tool_version: str,
    ext_str: dict[str, str],
    ext_code: dict[str, str],
    options: CLIOptions,
) -> Config:
    loader = ConfigLoader(ext_str=ext_str, ext_code=ext_code)
    try:
        cfg = loader.load(config, tool_version)
    except ConfigError as e:
        err_console.print(f"[red]✗ {type(e).__name__}:[/red] {e}")
        raise typer.Exit(code=1) from e
    cfg.override_by_cli_options(options)
    return cfg


def render(
    config: ConfigOption = Path("ecspresso.yml"),
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: yaml|json"),
    ] = "yaml",
    tool_version: ToolVersionOption = CURRENT_VERSION,
    ext_str: ExtStrOption = None,
    ext_code: ExtCodeOption = None,
    timeout: TimeoutOption = None,
    filter_command: FilterCommandOption = None,
) -> None:
    """Print the resolved config.

    Examples
    --------
    ecsconf render -c ecspresso.jsonnet --ext-str env=staging
    ecsconf render -c ecspresso.yml --format json
    """
    if output_format not in ("yaml", "json"):
        raise typer.BadParameter("must be yaml or json", param_hint="--format")

    cfg = _load(
        config,
        tool_version,
        parse_pairs(ext_str, "--ext-str"),
        parse_pairs(ext_code, "--ext-code"),
        cli_options(timeout, filter_command),
    )
    document = cfg.to_document()
    if output_format == "json":
        typer.echo(json.dumps(document, indent=2))
    else:
        typer.echo(yaml.safe_dump(document, sort_keys=False), nl=False)


def validate(
    config: ConfigOption = Path("ecspresso.yml"),
    tool_version: ToolVersionOption = CURRENT_VERSION,
    ext_str: ExtStrOption = None,
    ext_code: ExtCodeOption = None,
    timeout: TimeoutOption = None,
    filter_command: FilterCommandOption = None,
) -> None:
    """Load the config and report whether it resolves."""
    cfg = _load(
        config,
        tool_version,
        parse_pairs(ext_str, "--ext-str"),
        parse_pairs(ext_code, "--ext-code"),
        cli_options(timeout, filter_command),
    )

    table = Table(title=str(config), show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("region", cfg.region or "-")
    table.add_row("cluster", cfg.cluster)
    table.add_row("service", cfg.service or "-")
    table.add_row("service_definition", cfg.service_definition_path or "-")
    table.add_row("task_definition", cfg.task_definition_path or "-")
    table.add_row("timeout", str(cfg.timeout))
    table.add_row("filter_command", cfg.filter_command or "-")
    table.add_row("required_version", cfg.required_version or "-")
    table.add_row("plugins", ", ".join(p.name for p in cfg.plugins) or "-")

    console.print(table)
    console.print("[green]✓ Config is valid[/green]")
