"""Validation checkpoints for step navigation and final submission."""

from property_editor.coerce import is_blank
from property_editor.exceptions import ValidationError
from property_editor.logging import get_logger
from property_editor.models import PropertyRecord, PropertyStatus, PropertyType

logger = get_logger(__name__)

PROPERTY_TYPES = tuple(item.value for item in PropertyType)
PROPERTY_STATUSES = tuple(item.value for item in PropertyStatus)


def _type_violations(record: PropertyRecord) -> list[str]:
    if is_blank(record.type):
        return ["Property type is required"]
    if record.type not in PROPERTY_TYPES:
        return [f"Property type must be one of: {', '.join(PROPERTY_TYPES)}"]
    return []


def _valuation_violations(record: PropertyRecord) -> list[str]:
    violations = []
    if not record.total_value_usdt or record.total_value_usdt <= 0:
        violations.append("Total value (USDT) must be greater than 0")
    if not record.total_tokens or record.total_tokens <= 0:
        violations.append("Total tokens must be greater than 0")
    return violations


def validate_step(record: PropertyRecord) -> list[str]:
    """Violations blocking the move away from the basic-information step."""
    violations = []
    if is_blank(record.organization_id):
        violations.append("Organization is required")
    violations.extend(_type_violations(record))
    violations.extend(_valuation_violations(record))
    return violations


def validate_submission(record: PropertyRecord) -> list[str]:
    """Violations blocking submission; an empty list means the record may be sent."""
    violations = []
    if is_blank(record.organization_id):
        violations.append("Organization is required")
    violations.extend(_type_violations(record))
    if is_blank(record.status):
        violations.append("Status is required")
    elif record.status not in PROPERTY_STATUSES:
        violations.append(f"Status must be one of: {', '.join(PROPERTY_STATUSES)}")
    violations.extend(_valuation_violations(record))
    if record.expected_roi is None:
        violations.append("Expected ROI is required")
    if is_blank(record.title):
        violations.append("Title is required")
    if is_blank(record.description):
        violations.append("Description is required")
    if is_blank(record.location_city):
        violations.append("City is required")
    if is_blank(record.location_country):
        violations.append("Country is required")
    if not record.documents.has_any:
        violations.append("At least one document (brochure, floor plan or compliance) is required")
    return violations


def ensure_submittable(record: PropertyRecord) -> None:
    """Raise :class:`ValidationError` unless the record passes submission checks."""
    violations = validate_submission(record)
    if violations:
        logger.warning("Submission blocked by %d violation(s)", len(violations))
        raise ValidationError(violations)
