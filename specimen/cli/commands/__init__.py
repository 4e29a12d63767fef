"""CLI commands for specimen."""

from . import (
    create,
    config_cmd,
)

__all__ = [
    "create",
    "config_cmd",
]
