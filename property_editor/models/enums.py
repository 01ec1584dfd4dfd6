"""Enumeration types for property records."""

from enum import Enum


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


class PropertyStatus(str, Enum):
    COMING_SOON = "coming-soon"
    ACTIVE = "active"
    CONSTRUCTION = "construction"
    FUNDING = "funding"
    GENERATING_INCOME = "generating-income"
    ON_HOLD = "on-hold"
    SOLD_OUT = "sold-out"
    COMPLETED = "completed"
    PENDING = "pending"


class DocumentKind(str, Enum):
    BROCHURE = "brochure"
    FLOOR_PLAN = "floorPlan"
    COMPLIANCE = "compliance"


class OperationState(str, Enum):
    """Lifecycle of one asynchronous collaborator call."""

    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
