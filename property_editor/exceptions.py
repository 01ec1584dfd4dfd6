"""Custom exception hierarchy for property-editor."""


class PropertyEditorError(Exception):
    """Base exception for all property-editor errors."""


class ValidationError(PropertyEditorError):
    """Raised when a record fails a validation checkpoint.

    Never reaches the network: submission is blocked before any call.
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "Validation failed")


class UnknownFieldError(PropertyEditorError):
    """Raised when a mutation names a field the record does not have."""


class UploadError(PropertyEditorError):
    """Raised when an asset is rejected or the upload service fails."""

    def __init__(self, message: str, kind: str = "image") -> None:
        self.kind = kind
        super().__init__(message)


class PersistenceError(PropertyEditorError):
    """Raised when a create/update/status/delete call fails.

    ``kind`` is one of ``validation``, ``not_found``, ``not_implemented``,
    ``unreachable`` or ``server``.
    """

    def __init__(
        self,
        message: str,
        kind: str = "server",
        status_code: int | None = None,
        details: list[str] | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.details = details or []
        super().__init__(message)

    @property
    def is_rejection(self) -> bool:
        """True when the backend refused the payload itself."""
        return self.kind == "validation"


class LoadError(PropertyEditorError):
    """Raised when fetching a full record fails."""


class ConfigurationError(PropertyEditorError):
    """Raised when configuration is invalid or missing."""
