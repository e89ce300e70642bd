"""
Custom exception hierarchy for CorteX Map.
"""

import json
from typing import Any


class CortexMapError(Exception):
    """Base exception for all CorteX Map errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        """Initialize with message and optional context.

        Args:
            message: Error message
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(CortexMapError):
    """Invalid or unreadable configuration."""

    pass


# Input exceptions
class PayloadError(CortexMapError):
    """Reconnaissance payload file could not be read or decoded.

    Only raised at the file boundary. Malformed content inside a decoded
    payload never raises; it degrades to empty collections.
    """

    pass


# Layout exceptions
class LayoutError(CortexMapError):
    """Base exception for layout operations."""

    pass


# Export exceptions
class ExportError(CortexMapError):
    """Base exception for export operations."""

    pass


class RenderCaptureError(ExportError):
    """Graph snapshot could not be rasterized."""

    pass


class ExportWriteError(ExportError):
    """Export artifact could not be produced or saved."""

    pass


class ExportInProgressError(ExportError):
    """Another export is already running."""

    pass


def wrap_external_error(
    error: Exception, context: dict[str, Any] | None = None
) -> CortexMapError:
    """Wrap external exceptions in our custom exception hierarchy.

    Args:
        error: External exception to wrap
        context: Additional context information

    Returns:
        Appropriate CortexMapError subclass
    """
    error_message = str(error)
    error_context = context or {}
    error_context["original_error"] = type(error).__name__

    if isinstance(error, json.JSONDecodeError):
        return PayloadError(f"Invalid JSON payload: {error_message}", error_context)

    elif isinstance(error, FileNotFoundError):
        return PayloadError(f"File not found: {error_message}", error_context)

    elif isinstance(error, PermissionError):
        return ExportWriteError(f"Permission denied: {error_message}", error_context)

    elif isinstance(error, OSError):
        return ExportWriteError(f"I/O error: {error_message}", error_context)

    elif isinstance(error, ValueError | TypeError):
        return CortexMapError(f"Data validation error: {error_message}", error_context)

    else:
        return CortexMapError(f"Unexpected error: {error_message}", error_context)


def create_error_context(**kwargs) -> dict[str, Any]:
    """Create error context dictionary with standardized keys.

    Args:
        **kwargs: Context key-value pairs

    Returns:
        Context dictionary
    """
    context = {}

    for key, value in kwargs.items():
        if value is not None:
            context[key] = value

    return context
