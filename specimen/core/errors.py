"""Exceptions raised by the resolution engine.

``NoSpecimen`` is not represented here: it is a return value, not a failure.
"""

from __future__ import annotations

from typing import Sequence

from .requests import Request


class SpecimenError(Exception):
    """Base class for all engine errors."""


def _format_path(path: Sequence[Request]) -> str:
    return "\n".join(f"  {'  ' * depth}-> {request}" for depth, request in enumerate(path))


class UnresolvableRequestError(SpecimenError):
    """No builder in the graph produced a specimen for a top-level request.

    Remedy: register a builder (or inject a value) for the request.
    """

    def __init__(self, request: Request, path: Sequence[Request] = ()):
        self.request = request
        self.path = tuple(path)
        message = f"No builder could create a specimen for: {request}"
        if self.path:
            message += f"\nRequest path:\n{_format_path(self.path)}"
        super().__init__(message)


class CycleDetectedError(SpecimenError):
    """A request re-entered the graph while it was still being resolved.

    Remedy: break the cycle with an explicit override (inject, register) or
    switch the recursion handler to omit/null.
    """

    def __init__(self, request: Request, path: Sequence[Request] = ()):
        self.request = request
        self.path = tuple(path)
        message = f"Recursion detected while resolving: {request}"
        if self.path:
            message += f"\nRequest path:\n{_format_path(self.path)}"
        super().__init__(message)


class ConfigurationError(SpecimenError):
    """The builder graph or a customization is malformed."""


class GraphMutationError(ConfigurationError):
    """The graph was mutated while a resolution was in flight."""


class CannotConstructError(SpecimenError):
    """A builder recognised a request but cannot construct a value for it.

    This is the only fault the exception-to-NoSpecimen behavior translates;
    raise it for request-shape problems, never for programming errors.
    """

    def __init__(self, request: Request, reason: str = ""):
        self.request = request
        self.reason = reason
        message = f"Cannot construct {request}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
