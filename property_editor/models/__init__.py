"""Domain models for property records."""

from property_editor.models.enums import DocumentKind, OperationState, PropertyStatus, PropertyType
from property_editor.models.organization import Organization
from property_editor.models.property import (
    FIELD_ALIASES,
    Brochure,
    ComplianceDocument,
    Documents,
    FloorPlan,
    PropertyRecord,
    UnitType,
    canonical_field,
)

__all__ = [
    "FIELD_ALIASES",
    "Brochure",
    "ComplianceDocument",
    "DocumentKind",
    "Documents",
    "FloorPlan",
    "OperationState",
    "Organization",
    "PropertyRecord",
    "PropertyStatus",
    "PropertyType",
    "UnitType",
    "canonical_field",
]
