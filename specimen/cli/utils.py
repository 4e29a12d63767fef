"""CLI utilities for dual-mode output (human-friendly + machine-readable).

Example:
    from ..utils import Output, ExitCode

    @app.command()
    def my_command():
        out = Output(console=console, json_mode=get_json_mode())
        out.success("Created 3 specimens", count=3)
        return out.finish()
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr
from rich.console import Console
from rich.markup import escape

from ..core.errors import (
    ConfigurationError,
    CycleDetectedError,
    SpecimenError,
    UnresolvableRequestError,
)


class ExitCode:
    """Standardized exit codes for CLI commands.

        0 = Success
        1 = Configuration error (bad option, profile or config value)
        3 = Type not importable
        4 = Request unresolvable
        5 = Cycle detected
    """

    SUCCESS = 0
    CONFIGURATION_ERROR = 1
    TYPE_NOT_FOUND = 3
    UNRESOLVABLE = 4
    CYCLE_DETECTED = 5


def exit_code_for(error: BaseException) -> int:
    """Map an engine error onto its exit code."""
    if isinstance(error, CycleDetectedError):
        return ExitCode.CYCLE_DETECTED
    if isinstance(error, UnresolvableRequestError):
        return ExitCode.UNRESOLVABLE
    if isinstance(error, ImportError):
        return ExitCode.TYPE_NOT_FOUND
    if isinstance(error, (ConfigurationError, SpecimenError, ValueError)):
        return ExitCode.CONFIGURATION_ERROR
    raise error


class Output(BaseModel):
    """Dual-mode output handler for CLI commands.

    In human mode: Uses Rich for terminal output.
    In JSON mode: Collects structured data and prints it as JSON at the end.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    console: Console
    json_mode: bool = False

    _data: dict[str, Any] = PrivateAttr()
    _exit_code: int = PrivateAttr(default=ExitCode.SUCCESS)

    def model_post_init(self, __context: Any) -> None:
        self._data = {
            "status": "success",
            "errors": [],
        }

    def success(self, message: str, **data: Any) -> None:
        """Output a success message with optional data."""
        if self.json_mode:
            self._data.update(data)
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def error(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        exit_code: int = ExitCode.CONFIGURATION_ERROR,
    ) -> None:
        """Output an error message and set exit code."""
        self._exit_code = exit_code
        self._data["status"] = "error"

        if self.json_mode:
            error_obj: dict[str, Any] = {"message": message}
            if suggestion:
                error_obj["suggestion"] = suggestion
            self._data["errors"].append(error_obj)
        else:
            self.console.print(f"[red]✗[/red] {escape(message)}")
            if suggestion:
                self.console.print(f"  [dim]→ {suggestion}[/dim]")

    def set_data(self, key: str, value: Any) -> None:
        """Set arbitrary data in JSON output."""
        self._data[key] = value

    def finish(self) -> int:
        """Finalize output and return exit code.

        In JSON mode, prints the accumulated data as JSON to stdout.
        """
        if self.json_mode:
            self._data["exit_code"] = self._exit_code
            print(json.dumps(self._data, indent=2, default=str))

        return self._exit_code
