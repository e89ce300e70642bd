"""
Tests for custom exception hierarchy.
"""

import json

import pytest

from cortex_map.shared.exceptions import (
    ConfigurationError,
    CortexMapError,
    ExportError,
    ExportInProgressError,
    ExportWriteError,
    LayoutError,
    PayloadError,
    RenderCaptureError,
    create_error_context,
    wrap_external_error,
)


class TestCortexMapError:
    """Tests for base exception class."""

    def test_basic_creation(self) -> None:
        """Test creating exception with just a message."""
        error = CortexMapError("Test error message")
        assert error.message == "Test error message"
        assert error.context == {}
        assert str(error) == "Test error message"

    def test_creation_with_context(self) -> None:
        """Test creating exception with context."""
        context = {"file": "payload.json", "line": 42}
        error = CortexMapError("Test error", context=context)
        assert error.context == context
        assert "file=payload.json" in str(error)
        assert "line=42" in str(error)

    def test_str_representation(self) -> None:
        """Test string representation includes context."""
        error = CortexMapError("Error", context={"key": "value"})
        result = str(error)
        assert "Error" in result
        assert "(Context:" in result
        assert "key=value" in result


class TestExportExceptions:
    """Tests for export-related exceptions."""

    def test_export_error_inheritance(self) -> None:
        """Test ExportError inherits from CortexMapError."""
        assert isinstance(ExportError("Export error"), CortexMapError)

    def test_render_capture_error(self) -> None:
        """Test RenderCaptureError."""
        error = RenderCaptureError("Capture failed", context={"nodes": 0})
        assert isinstance(error, ExportError)
        assert "nodes=0" in str(error)

    def test_export_in_progress_error(self) -> None:
        """Test ExportInProgressError."""
        error = ExportInProgressError("Busy", context={"requested": "pdf"})
        assert isinstance(error, ExportError)
        assert "requested=pdf" in str(error)


class TestWrapExternalError:
    """Tests for wrap_external_error utility."""

    def test_wrap_json_decode_error(self) -> None:
        """Test wrapping a JSON decoding failure."""
        original = json.JSONDecodeError("Expecting value", "{", 1)
        wrapped = wrap_external_error(original)
        assert isinstance(wrapped, PayloadError)
        assert "Invalid JSON payload" in str(wrapped)
        assert wrapped.context["original_error"] == "JSONDecodeError"

    def test_wrap_file_not_found_error(self) -> None:
        """Test wrapping FileNotFoundError."""
        wrapped = wrap_external_error(FileNotFoundError("payload.json not found"))
        assert isinstance(wrapped, PayloadError)
        assert "File not found" in str(wrapped)
        assert wrapped.context["original_error"] == "FileNotFoundError"

    def test_wrap_permission_error(self) -> None:
        """Test wrapping PermissionError."""
        wrapped = wrap_external_error(PermissionError("Access denied"))
        assert isinstance(wrapped, ExportWriteError)
        assert "Permission denied" in str(wrapped)

    def test_wrap_os_error(self) -> None:
        """Test wrapping a generic OSError."""
        wrapped = wrap_external_error(OSError("No space left on device"))
        assert isinstance(wrapped, ExportWriteError)
        assert "I/O error" in str(wrapped)

    def test_wrap_value_error(self) -> None:
        """Test wrapping ValueError."""
        wrapped = wrap_external_error(ValueError("Invalid value"))
        assert type(wrapped) is CortexMapError
        assert "Data validation error" in str(wrapped)

    def test_wrap_type_error(self) -> None:
        """Test wrapping TypeError."""
        wrapped = wrap_external_error(TypeError("Wrong type"))
        assert "Data validation error" in str(wrapped)

    def test_wrap_unknown_error(self) -> None:
        """Test wrapping unknown error type."""
        wrapped = wrap_external_error(RuntimeError("Unknown error"))
        assert isinstance(wrapped, CortexMapError)
        assert "Unexpected error" in str(wrapped)

    def test_wrap_with_context(self) -> None:
        """Test wrapping error with additional context."""
        context = {"field": "name", "value": None}
        wrapped = wrap_external_error(ValueError("Bad value"), context=context)
        assert wrapped.context["field"] == "name"
        assert wrapped.context["value"] is None
        assert wrapped.context["original_error"] == "ValueError"


class TestCreateErrorContext:
    """Tests for create_error_context utility."""

    def test_empty_context(self) -> None:
        """Test creating empty context."""
        assert create_error_context() == {}

    def test_filters_none_values(self) -> None:
        """Test that None values are filtered out."""
        context = create_error_context(path="payload.json", line=None, column=10)
        assert context == {"path": "payload.json", "column": 10}


class TestExceptionHierarchy:
    """Tests for exception hierarchy relationships."""

    def test_all_inherit_from_base(self) -> None:
        """Test all exceptions inherit from CortexMapError."""
        exceptions = [
            ConfigurationError("test"),
            PayloadError("test"),
            LayoutError("test"),
            ExportError("test"),
            RenderCaptureError("test"),
            ExportWriteError("test"),
            ExportInProgressError("test"),
        ]
        for exc in exceptions:
            assert isinstance(exc, CortexMapError)
            assert isinstance(exc, Exception)

    def test_can_catch_by_base_class(self) -> None:
        """Test exceptions can be caught by base class."""
        with pytest.raises(CortexMapError):
            raise PayloadError("Unreadable payload")

        with pytest.raises(ExportError):
            raise ExportWriteError("Disk full")
