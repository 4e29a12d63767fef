"""Create command: build anonymous specimens for an importable type."""

import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import PydanticSchemaGenerationError, TypeAdapter
from rich.logging import RichHandler
from rich.pretty import Pretty

from ...config import SpecimenConfig, get_config
from ...core.errors import SpecimenError
from ...utils.imports import TypePathError, resolve_type_path
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output, exit_code_for


def setup_logging(verbose: bool = False, debug: bool = False):
    """Configure logging for a CLI run."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    logging.getLogger("specimen").setLevel(level)


def to_jsonable(value: Any) -> Any:
    """JSON-safe form of a specimen, falling back to its repr."""
    try:
        return TypeAdapter(type(value)).dump_python(value, mode="json")
    except (PydanticSchemaGenerationError, TypeError, ValueError):
        return repr(value)


@app.command("create")
def create_command(
    type_path: str = typer.Argument(
        ...,
        help="Type to create, as module:Name (or a builtin such as int)",
    ),
    count: int = typer.Option(1, "--count", "-n", min=1, help="Number of specimens"),
    seed: int | None = typer.Option(
        None, "--seed", help="Random seed for reproducibility"
    ),
    trace: bool = typer.Option(False, "--trace", "-t", help="Show the resolution trace"),
    profile: Path | None = typer.Option(
        None, "--profile", "-p", help="YAML profile with injected values and seeds"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info logs"),
    debug: bool = typer.Option(False, "--debug", help="Show per-request debug logs"),
):
    """
    Create anonymous specimens of a type.

    EXIT CODES:
        0 = Success
        1 = Configuration error
        3 = Type not importable
        4 = No builder can create the type
        5 = The type refers back to itself

    Examples:
        specimen create myapp.models:User
        specimen create myapp.models:Order -n 5 --seed 42
        specimen --json create myapp.models:User --profile fixtures.yaml --trace
    """
    from ...fixture import Fixture
    from ...profile import ProfileCustomization

    setup_logging(verbose=verbose, debug=debug)
    out = Output(console=console, json_mode=get_json_mode())

    try:
        tp = resolve_type_path(type_path)
    except TypePathError as e:
        out.error(
            str(e),
            suggestion="Use module:Name and make sure the module is importable",
            exit_code=ExitCode.TYPE_NOT_FOUND,
        )
        raise typer.Exit(out.finish())

    config: SpecimenConfig = get_config()
    trace_lines: list[str] = []
    try:
        fixture = Fixture(config, seed=seed)
        if profile is not None:
            fixture.customize(ProfileCustomization.from_yaml(profile))
        if trace:
            fixture.trace(trace_lines.append)
        specimens = [fixture.create(tp) for _ in range(count)]
    except (SpecimenError, ValueError) as e:
        if trace_lines:
            out.set_data("trace", trace_lines)
            if not out.json_mode:
                for line in trace_lines:
                    console.print(line, markup=False, highlight=False, style="dim")
        out.error(str(e), exit_code=exit_code_for(e))
        raise typer.Exit(out.finish())

    out.set_data("type", type_path)
    out.set_data("seed", fixture.seed)
    out.set_data("specimens", [to_jsonable(s) for s in specimens])
    if trace:
        out.set_data("trace", trace_lines)
    if not out.json_mode:
        for line in trace_lines:
            console.print(line, markup=False, highlight=False, style="dim")
        for specimen in specimens:
            console.print(Pretty(specimen))
    out.success(f"Created {count} specimen(s) of {type_path}", count=count)
    raise typer.Exit(out.finish())
