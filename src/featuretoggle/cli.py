"""Command-line interface for inspecting and evaluating toggle configs."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
import yaml
from pydantic import ValidationError as ConfigValidationError
from rich.console import Console
from rich.table import Table

from featuretoggle.errors import ToggleError

if TYPE_CHECKING:
    from featuretoggle.registry import FeatureRegistry

EXIT_ACTIVE = 0
EXIT_INACTIVE = 1
EXIT_ERROR = 2

app = typer.Typer(
    name="featuretoggle",
    help="Inspect and evaluate feature toggle configurations.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to toggle configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
ContextOption = Annotated[
    list[str] | None,
    typer.Option(
        "--context",
        "-x",
        help="Context entry as key=value (repeatable). Values are parsed as YAML scalars.",
    ),
]


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level."),
    ] = None,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Render logs as JSON."),
    ] = False,
) -> None:
    """Feature toggle registry tools."""
    ctx.obj = {"log_level": log_level, "json_logs": json_logs}


def parse_context(entries: list[str] | None) -> dict[str, Any]:
    """
    Parse ``key=value`` pairs into a context mapping.

    Raises:
        typer.BadParameter: If an entry has no ``=`` or an empty key.
    """
    context: dict[str, Any] = {}
    for entry in entries or []:
        key, sep, raw = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Context entry must look like key=value, got: {entry!r}"
            raise typer.BadParameter(msg)
        context[key] = yaml.safe_load(raw) if raw else ""
    return context


def _load_registry(ctx: typer.Context, config: Path) -> "FeatureRegistry":
    from featuretoggle.config.loader import load_config
    from featuretoggle.utils.logging import configure_logging

    options = ctx.obj or {}
    try:
        toggle_config = load_config(config)
    except (ConfigValidationError, ToggleError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from e

    configure_logging(
        level=options.get("log_level") or toggle_config.logging.level,
        json_output=options.get("json_logs") or toggle_config.logging.json_output,
    )

    try:
        return toggle_config.to_registry()
    except ToggleError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from e


def _processor_label(processor: Any) -> str:
    module = getattr(processor, "__module__", None)
    name = getattr(processor, "__qualname__", None) or type(processor).__name__
    if module and module != "featuretoggle.features.definitions":
        return f"{module}:{name}"
    return name


@app.command("list")
def list_features(ctx: typer.Context, config: ConfigOption) -> None:
    """List the features defined in a configuration."""
    registry = _load_registry(ctx, config)

    table = Table(title=f"Features ({len(registry)})")
    table.add_column("Name", style="cyan")
    table.add_column("Processor")
    table.add_column("Static result")
    table.add_column("Params", style="dim")

    for name, feature in registry.all().items():
        static = "-" if feature.static_result is None else str(feature.static_result)
        table.add_row(name, _processor_label(feature.processor), static, str(feature.params))

    console.print(table)


@app.command()
def check(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Feature name to evaluate.")],
    config: ConfigOption,
    context: ContextOption = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on unknown features."),
    ] = False,
) -> None:
    """Evaluate one feature. Exits 0 when active, 1 when inactive."""
    registry = _load_registry(ctx, config)
    if strict:
        registry.set_strict(True)

    try:
        active = registry.is_active(name, parse_context(context))
    except ToggleError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from e

    if active:
        console.print(f"[green]{name}: active[/green]")
        raise typer.Exit(code=EXIT_ACTIVE)
    console.print(f"[yellow]{name}: inactive[/yellow]")
    raise typer.Exit(code=EXIT_INACTIVE)


@app.command()
def snapshot(
    ctx: typer.Context,
    config: ConfigOption,
    context: ContextOption = None,
    seed: Annotated[
        Path | None,
        typer.Option(
            "--seed",
            "-s",
            help="Snapshot JSON to import before evaluating.",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the snapshot JSON here."),
    ] = None,
) -> None:
    """Evaluate every feature and optionally save the result snapshot."""
    from featuretoggle.snapshot import load_snapshot, save_snapshot

    registry = _load_registry(ctx, config)

    try:
        if seed is not None:
            registry.result(load_snapshot(seed))
            console.print(f"[dim]Seeded results from {seed}[/dim]")
        result = registry.result(context=parse_context(context))
    except ToggleError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from e

    table = Table(title="Toggle Results")
    table.add_column("Feature", style="cyan")
    table.add_column("Active")
    for name, active in result.items():
        table.add_row(name, "[green]yes[/green]" if active else "[red]no[/red]")
    console.print(table)

    if output is not None:
        save_snapshot(result, output)
        console.print(f"\n[green]Saved to: {output}[/green]")


if __name__ == "__main__":
    app()
