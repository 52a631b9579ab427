# -*- coding: utf-8 -*-
"""
Exception hierarchy for stack mesh assembly.

All failures raised by this package are configuration or topology bugs, never
transient conditions, so none of them is retried.
"""


class StackMeshError(Exception):
    """Base class for all errors raised by stack_mesh."""


class ConfigurationError(StackMeshError, ValueError):
    """A configuration value is missing, malformed or inconsistent."""


class MeshInvariantError(StackMeshError, RuntimeError):
    """The assembled mesh violates an invariant on at least one rank."""


class MeshReadError(StackMeshError, IOError):
    """A mesh file could not be read."""

    def __init__(self, filename: str, extension: str, reason: str = "") -> None:
        self.filename = filename
        self.extension = extension
        message = f"Could not read mesh file '{filename}' (extension '.{extension}')"
        if reason:
            message += f": {reason}"
        super().__init__(message)
