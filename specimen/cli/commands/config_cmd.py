"""Config command for viewing and managing specimen configuration."""

import os

import typer

from ...config import (
    CONFIG_FILE,
    INT_FIELDS,
    RECURSION_HANDLER_NAMES,
    SpecimenConfig,
    get_config,
    reset_config,
)
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output

VALID_KEYS = {
    "engine.repeat_count",
    "engine.recursion_depth",
    "engine.recursion_handler",
    "generator.seed",
    "generator.faker_locale",
}

ENV_VARS = {
    "engine.repeat_count": "SPECIMEN_REPEAT_COUNT",
    "engine.recursion_depth": "SPECIMEN_RECURSION_DEPTH",
    "engine.recursion_handler": "SPECIMEN_RECURSION_HANDLER",
    "generator.seed": "SPECIMEN_SEED",
    "generator.faker_locale": "SPECIMEN_FAKER_LOCALE",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. engine.repeat_count, generator.seed)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set ('none' clears generator.seed)",
    ),
):
    """View or modify specimen configuration.

    Examples:
        specimen config show
        specimen config set engine.repeat_count 5
        specimen config set engine.recursion_handler omit
        specimen config set generator.seed 42
        specimen config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] specimen config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(ExitCode.CONFIGURATION_ERROR)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(ExitCode.CONFIGURATION_ERROR)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    if get_json_mode():
        out = Output(console=console, json_mode=True)
        out.set_data("config", config.to_dict())
        out.set_data("config_file", str(CONFIG_FILE))
        raise typer.Exit(out.finish())

    console.print()
    console.print("[bold]Specimen Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Engine[/bold cyan]")
    console.print(f"  repeat_count      = {config.engine.repeat_count}")
    console.print(f"  recursion_depth   = {config.engine.recursion_depth}")
    console.print(f"  recursion_handler = {config.engine.recursion_handler}")

    console.print()
    console.print("[bold cyan]Generator[/bold cyan]")
    seed = config.generator.seed if config.generator.seed is not None else "[dim](random)[/dim]"
    console.print(f"  seed              = {seed}")
    console.print(f"  faker_locale      = {config.generator.faker_locale}")

    overrides = [(k, env) for k, env in sorted(ENV_VARS.items()) if os.environ.get(env)]
    if overrides:
        console.print()
        console.print("[bold cyan]Environment overrides[/bold cyan]")
        for k, env in overrides:
            console.print(f"  {env} → {k}")

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(ExitCode.CONFIGURATION_ERROR)

    config = SpecimenConfig.load(env=False)
    zone, field_name = key.split(".", 1)
    target = config.engine if zone == "engine" else config.generator

    if field_name == "seed" and value.lower() in ("none", "null", ""):
        parsed = None
    elif field_name in INT_FIELDS:
        try:
            parsed = int(value)
        except ValueError:
            console.print(f"[red]Invalid integer value:[/red] {value}")
            raise typer.Exit(ExitCode.CONFIGURATION_ERROR)
    else:
        parsed = value

    if field_name == "recursion_handler" and parsed not in RECURSION_HANDLER_NAMES:
        console.print(
            f"[red]Invalid recursion handler:[/red] {value} "
            f"(expected one of: {', '.join(RECURSION_HANDLER_NAMES)})"
        )
        raise typer.Exit(ExitCode.CONFIGURATION_ERROR)

    setattr(target, field_name, parsed)
    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]Invalid value:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIGURATION_ERROR)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {parsed}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    if CONFIG_FILE.exists():
        CONFIG_FILE.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {CONFIG_FILE}")
    else:
        console.print("Config already at defaults (no config file exists)")
