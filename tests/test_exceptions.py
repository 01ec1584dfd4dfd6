"""Tests for custom exception hierarchy."""

from property_editor.exceptions import (
    ConfigurationError,
    LoadError,
    PersistenceError,
    PropertyEditorError,
    UnknownFieldError,
    UploadError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_property_editor_error_is_exception(self) -> None:
        assert isinstance(PropertyEditorError("test"), Exception)

    def test_validation_error_is_property_editor_error(self) -> None:
        assert isinstance(ValidationError(["x"]), PropertyEditorError)

    def test_upload_error_is_property_editor_error(self) -> None:
        assert isinstance(UploadError("test"), PropertyEditorError)

    def test_persistence_error_is_property_editor_error(self) -> None:
        assert isinstance(PersistenceError("test"), PropertyEditorError)

    def test_load_error_is_property_editor_error(self) -> None:
        assert isinstance(LoadError("test"), PropertyEditorError)

    def test_configuration_error_is_property_editor_error(self) -> None:
        assert isinstance(ConfigurationError("test"), PropertyEditorError)

    def test_unknown_field_error_is_property_editor_error(self) -> None:
        assert isinstance(UnknownFieldError("test"), PropertyEditorError)


class TestExceptionPayloads:
    """Test the data carried by each exception."""

    def test_validation_error_joins_violations(self) -> None:
        err = ValidationError(["Title is required", "City is required"])

        assert err.violations == ["Title is required", "City is required"]
        assert str(err) == "Title is required; City is required"

    def test_validation_error_without_violations(self) -> None:
        assert str(ValidationError([])) == "Validation failed"

    def test_upload_error_kind(self) -> None:
        err = UploadError("File too large", kind="document")

        assert err.kind == "document"
        assert str(err) == "File too large"

    def test_persistence_error_defaults(self) -> None:
        err = PersistenceError("Server error")

        assert err.kind == "server"
        assert err.status_code is None
        assert err.details == []
        assert not err.is_rejection

    def test_persistence_error_rejection(self) -> None:
        err = PersistenceError(
            "Validation failed", kind="validation", status_code=400, details=["title: required"]
        )

        assert err.is_rejection
        assert err.status_code == 400
        assert err.details == ["title: required"]
