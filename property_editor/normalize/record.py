"""Conversion between raw API data, the record, and the submission payload."""

import re
from typing import Any, Iterable

from property_editor.coerce import is_blank, round6, to_int, to_number
from property_editor.logging import get_logger
from property_editor.models import FIELD_ALIASES, Organization, PropertyRecord
from property_editor.models.property import RECORD_FIELDS
from property_editor.normalize.documents import documents_payload, normalize_documents
from property_editor.normalize.images import images_payload, normalize_images
from property_editor.rules import DerivationEngine, resync_derived

logger = get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Nested groups older responses use, flattened to ``{group}_{key}``
NESTED_GROUPS = ("location", "pricing", "tokenization")
NESTED_KEY_ALIASES = {
    "lat": "latitude",
    "lng": "longitude",
    "roi": "expected_roi",
    "pricePerToken": "price_per_token",
}

# Handled outside the generic field loop
_SPECIAL_KEYS = {"images", "documents", "features", "organization", "organizationId", "organization_id"}

# Persisted schema, in payload order: (record attribute, payload key)
PAYLOAD_FIELDS = (
    ("organization_id", "organizationId"),
    ("type", "type"),
    ("status", "status"),
    ("total_value_usdt", "totalValueUSDT"),
    ("total_tokens", "totalTokens"),
    ("expected_roi", "expectedROI"),
    ("full_roi", "fullROI"),
    ("title", "title"),
    ("slug", "slug"),
    ("description", "description"),
    ("short_description", "short_description"),
    ("project_type", "project_type"),
    ("location_address", "location_address"),
    ("location_city", "location_city"),
    ("location_state", "location_state"),
    ("location_country", "location_country"),
    ("location_latitude", "location_latitude"),
    ("location_longitude", "location_longitude"),
    ("construction_progress", "construction_progress"),
    ("start_date", "start_date"),
    ("expected_completion", "expected_completion"),
    ("handover_date", "handover_date"),
    ("floors", "floors"),
    ("total_units", "total_units"),
    ("bedrooms", "bedrooms"),
    ("bathrooms", "bathrooms"),
    ("area_sqm", "area_sqm"),
    ("is_featured", "is_featured"),
)

_engine = DerivationEngine()


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def resolve_organization(value: Any, organizations: Iterable[Organization] | None) -> str:
    """Canonical organization reference for ``value``.

    Matches exactly on either the id or the display code and returns the
    directory's reference; unresolved values come back unchanged.
    """
    text = "" if value is None else str(value).strip()
    for organization in organizations or ():
        if organization.matches(text):
            return organization.reference
    return text


def _raw_organization(raw: dict[str, Any]) -> Any:
    for key in ("organizationId", "organization_id"):
        if not is_blank(raw.get(key)):
            return raw[key]
    nested = raw.get("organization")
    if isinstance(nested, dict):
        return nested.get("displayCode") or nested.get("id")
    return nested


def _flatten(raw: dict[str, Any]) -> dict[str, Any]:
    """Record-attribute view of a raw mapping; flat keys win over nested ones."""
    flat: dict[str, Any] = {}
    for group in NESTED_GROUPS:
        nested = raw.get(group)
        if not isinstance(nested, dict):
            continue
        for key, value in nested.items():
            key = NESTED_KEY_ALIASES.get(key, key)
            name = _snake(key)
            if name == "expected_roi" and group == "pricing":
                flat.setdefault("pricing_expected_roi", value)
                continue
            if f"{group}_{name}" in RECORD_FIELDS:
                flat[f"{group}_{name}"] = value

    for key, value in raw.items():
        if key in _SPECIAL_KEYS or key in NESTED_GROUPS:
            continue
        name = FIELD_ALIASES.get(key, key)
        if name in RECORD_FIELDS:
            flat[name] = value
    return flat


def _unpack_features(raw: Any, flat: dict[str, Any]) -> None:
    """Older submissions nested amenities and unit types under ``features``."""
    if isinstance(raw, dict):
        for key in ("amenities", "unit_types"):
            if key in raw and is_blank(flat.get(key)):
                flat[key] = raw[key]
        if "features" in raw:
            flat["features"] = raw["features"]
        elif "list" in raw:
            flat["features"] = raw["list"]
    elif isinstance(raw, list):
        flat["features"] = raw


def from_raw(
    raw: dict[str, Any] | None,
    organizations: Iterable[Organization] | None = None,
) -> PropertyRecord:
    """Build a canonical record from raw API or stub data."""
    record = PropertyRecord()
    if not raw:
        return record

    flat = _flatten(raw)
    _unpack_features(raw.get("features"), flat)

    # Primaries fall back to their mirrors when the backend omitted them
    if is_blank(flat.get("total_value_usdt")) and to_number(flat.get("pricing_total_value")):
        flat["total_value_usdt"] = flat["pricing_total_value"]
    if is_blank(flat.get("total_tokens")) and to_int(flat.get("tokenization_total_tokens")):
        flat["total_tokens"] = flat["tokenization_total_tokens"]
    if is_blank(flat.get("expected_roi")) and to_number(flat.get("pricing_expected_roi")) is not None:
        flat["expected_roi"] = flat["pricing_expected_roi"]

    # Available tokens are clamped against the totals, so they go last
    available = flat.pop("tokenization_available_tokens", None)
    for name, value in flat.items():
        if value is None:
            continue
        setattr(record, name, _engine.coerce(record, name, value))
    if available is not None:
        record.tokenization_available_tokens = _engine.coerce(
            record, "tokenization_available_tokens", available
        )

    record.organization_id = resolve_organization(_raw_organization(raw), organizations)
    record.images = normalize_images(raw.get("images"))
    record.documents = normalize_documents(raw.get("documents"))

    changed = resync_derived(record)
    if changed:
        logger.debug("Resynced derived fields on load: %s", changed)
    return record


def to_payload(record: PropertyRecord) -> dict[str, Any]:
    """Minimal submission payload in the backend's persisted schema."""
    payload: dict[str, Any] = {}
    for name, key in PAYLOAD_FIELDS:
        value = getattr(record, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        payload[key] = value

    available = record.tokenization_available_tokens
    payload["availableTokens"] = record.total_tokens if available is None else available
    if record.price_per_token_usdt is not None:
        payload["pricePerTokenUSDT"] = record.price_per_token_usdt
    elif record.total_value_usdt > 0 and record.total_tokens > 0:
        payload["pricePerTokenUSDT"] = round6(record.total_value_usdt / record.total_tokens)

    payload["unit_types"] = [unit.to_dict() for unit in record.unit_types]
    payload["features"] = list(record.features)
    payload["amenities"] = list(record.amenities)
    payload["property_features"] = list(record.property_features)
    payload["images"] = images_payload(record.images)

    documents = documents_payload(record.documents)
    if documents:
        payload["documents"] = documents
    return payload
