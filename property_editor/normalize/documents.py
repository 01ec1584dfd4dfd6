"""Document normalization between legacy lists and the canonical object."""

import mimetypes
from typing import Any

from property_editor.logging import get_logger
from property_editor.models import Brochure, ComplianceDocument, Documents, FloorPlan
from property_editor.normalize.shapes import (
    CanonicalObjectShape,
    LegacyArrayShape,
    detect_document_shape,
)

logger = get_logger(__name__)

DEFAULT_COMPLIANCE_TYPE = "other"


def _as_entry(item: Any) -> dict[str, Any]:
    if isinstance(item, str):
        return {"url": item}
    if isinstance(item, dict):
        return item
    return {}


def _text(entry: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = entry.get(key)
        if value not in (None, ""):
            return str(value)
    return ""


def _optional(entry: dict[str, Any], *keys: str) -> str | None:
    return _text(entry, *keys) or None


def guess_mime_type(url: str) -> str:
    return mimetypes.guess_type(url.split("?", 1)[0])[0] or ""


def make_brochure(entry: dict[str, Any]) -> Brochure:
    return Brochure(
        url=_text(entry, "url"),
        name=_text(entry, "name", "title"),
        notes=_text(entry, "notes", "description"),
    )


def make_floor_plan(entry: dict[str, Any]) -> FloorPlan:
    url = _text(entry, "url")
    return FloorPlan(
        url=url,
        version=_text(entry, "version"),
        mime_type=_text(entry, "mimeType", "mime_type") or guess_mime_type(url),
    )


def make_compliance(entry: dict[str, Any]) -> ComplianceDocument:
    return ComplianceDocument(
        url=_text(entry, "url"),
        type=_text(entry, "type") or DEFAULT_COMPLIANCE_TYPE,
        issued_at=_optional(entry, "issuedAt", "issued_at"),
        issued_by=_optional(entry, "issuedBy", "issued_by"),
    )


def classify_legacy_entry(entry: dict[str, Any]) -> str:
    """Guess the canonical slot of a legacy attachment from its type and name."""
    text = " ".join(
        [_text(entry, "type"), _text(entry, "name"), _text(entry, "url").rsplit("/", 1)[-1]]
    ).lower()
    if "brochure" in text:
        return "brochure"
    if "floor" in text:
        return "floorPlan"
    return "compliance"


def _from_legacy(shape: LegacyArrayShape) -> Documents:
    documents = Documents()
    for item in shape.entries:
        entry = _as_entry(item)
        if not _text(entry, "url"):
            logger.debug("Skipping legacy document without url: %r", item)
            continue
        slot = classify_legacy_entry(entry)
        if slot == "brochure" and documents.brochure is None:
            documents.brochure = make_brochure(entry)
        elif slot == "floorPlan" and documents.floor_plan is None:
            documents.floor_plan = make_floor_plan(entry)
        else:
            # A second brochure or floor plan is kept as a compliance attachment
            documents.compliance.append(make_compliance(entry))
    return documents


def _from_canonical(shape: CanonicalObjectShape) -> Documents:
    brochure = _as_entry(shape.brochure)
    floor_plan = _as_entry(shape.floor_plan)
    compliance = [_as_entry(item) for item in shape.compliance]
    return Documents(
        brochure=make_brochure(brochure) if _text(brochure, "url") else None,
        floor_plan=make_floor_plan(floor_plan) if _text(floor_plan, "url") else None,
        compliance=[make_compliance(entry) for entry in compliance if _text(entry, "url")],
    )


def normalize_documents(raw: Any) -> Documents:
    """Reduce any stored document shape to canonical :class:`Documents`."""
    shape = detect_document_shape(raw)
    if shape is None:
        if raw not in (None, "", [], {}):
            logger.warning("Ignoring unrecognized documents value of type %s", type(raw).__name__)
        return Documents()
    if isinstance(shape, LegacyArrayShape):
        return _from_legacy(shape)
    if isinstance(shape, CanonicalObjectShape):
        return _from_canonical(shape)
    raise TypeError(f"Unhandled document shape: {shape!r}")


def _without_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "")}


def documents_payload(documents: Documents) -> dict[str, Any]:
    """Canonical object with only the keys that carry data."""
    payload: dict[str, Any] = {}
    if documents.brochure and documents.brochure.url:
        brochure = documents.brochure
        payload["brochure"] = _without_empty(
            {"url": brochure.url, "name": brochure.name, "notes": brochure.notes}
        )
    if documents.floor_plan and documents.floor_plan.url:
        plan = documents.floor_plan
        payload["floorPlan"] = _without_empty(
            {"url": plan.url, "version": plan.version, "mimeType": plan.mime_type}
        )
    compliance = [
        _without_empty(
            {"url": doc.url, "type": doc.type, "issuedAt": doc.issued_at, "issuedBy": doc.issued_by}
        )
        for doc in documents.compliance
        if doc.url
    ]
    if compliance:
        payload["compliance"] = compliance
    return payload
