"""Property record model edited by one session at a time."""

from dataclasses import dataclass, field, fields

from property_editor.exceptions import UnknownFieldError


@dataclass
class UnitType:
    """One row of the unit breakdown."""

    type: str
    size: str
    count: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "size": self.size, "count": self.count}


@dataclass
class Brochure:
    url: str
    name: str = ""
    notes: str = ""


@dataclass
class FloorPlan:
    url: str
    version: str = ""
    mime_type: str = ""


@dataclass
class ComplianceDocument:
    url: str
    type: str = ""
    issued_at: str | None = None
    issued_by: str | None = None


@dataclass
class Documents:
    """Canonical document set: brochure, floor plan and compliance list."""

    brochure: Brochure | None = None
    floor_plan: FloorPlan | None = None
    compliance: list[ComplianceDocument] = field(default_factory=list)

    @property
    def has_any(self) -> bool:
        return bool(self.brochure or self.floor_plan or self.compliance)


@dataclass
class PropertyRecord:
    """Mutable in-progress property record.

    Defaults describe a fresh record in create mode. ``pricing_*`` and
    ``tokenization_total_tokens`` mirror the valuation fields and are kept in
    sync by :mod:`property_editor.rules`.
    """

    # Identity
    id: str | None = None
    organization_id: str = ""
    type: str = "residential"
    status: str = "active"

    # Valuation
    total_value_usdt: float = 0.0
    total_tokens: int = 1000
    expected_roi: float | None = None
    full_roi: float = 0.0
    price_per_token_usdt: float | None = None

    # Mirrors
    pricing_total_value: str = ""
    pricing_expected_roi: str = ""
    pricing_market_value: str = ""
    pricing_appreciation: str = ""
    pricing_min_investment: str = ""

    # Tokenization
    tokenization_total_tokens: int = 1000
    tokenization_available_tokens: int | None = None
    tokenization_price_per_token: str = ""
    tokenization_token_price: str = ""

    # Descriptive
    title: str = ""
    slug: str = ""
    description: str = ""
    short_description: str = ""
    project_type: str = ""
    location_address: str = ""
    location_city: str = ""
    location_state: str = ""
    location_country: str = ""
    location_latitude: str = ""
    location_longitude: str = ""

    # Construction
    construction_progress: int = 0
    start_date: str = ""
    expected_completion: str = ""
    handover_date: str = ""
    floors: int | None = None
    total_units: int | None = None

    # Listing details
    bedrooms: int = 2
    bathrooms: int = 2
    area_sqm: float = 100.0
    appreciation_percentage: float = 20.0
    is_featured: bool = False

    # Collections
    unit_types: list[UnitType] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    amenities: list[str] = field(default_factory=list)
    property_features: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    documents: Documents = field(default_factory=Documents)


RECORD_FIELDS = frozenset(f.name for f in fields(PropertyRecord))

# Wire names used by the backend and older form payloads
FIELD_ALIASES = {
    "organizationId": "organization_id",
    "totalValueUSDT": "total_value_usdt",
    "totalTokens": "total_tokens",
    "expectedROI": "expected_roi",
    "fullROI": "full_roi",
    "pricePerTokenUSDT": "price_per_token_usdt",
    "availableTokens": "tokenization_available_tokens",
    "propertyType": "type",
}


def canonical_field(name: str) -> str:
    """Map a wire or attribute name to the record attribute name."""
    resolved = FIELD_ALIASES.get(name, name)
    if resolved not in RECORD_FIELDS:
        raise UnknownFieldError(f"Unknown property field: {name}")
    return resolved
