"""Tagged variants for the historical image and document shapes.

Raw data arrives in whichever shape the record was last saved with. Each
detector classifies the raw value once; normalizers then dispatch on the
variant type instead of probing the raw value again.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class StringArray:
    """``["https://...", ...]``"""

    urls: list[str]


@dataclass(frozen=True)
class UrlObjectArray:
    """``[{"url": "...", "alt": "..."}, ...]``, possibly mixed with strings."""

    items: list[Any]


@dataclass(frozen=True)
class UrlsWrapper:
    """``{"urls": [...]}``, the shape the backend persists."""

    urls: list[Any]


@dataclass(frozen=True)
class KeyedSlots:
    """``{"main": ..., "gallery": [...]}``, one entry per named slot."""

    slots: dict[str, Any]


ImageShape = Union[StringArray, UrlObjectArray, UrlsWrapper, KeyedSlots]


@dataclass(frozen=True)
class LegacyArrayShape:
    """Flat list of typed attachments ``[{"name", "url", "type"}, ...]``."""

    entries: list[Any]


@dataclass(frozen=True)
class CanonicalObjectShape:
    """``{"brochure": ..., "floorPlan": ..., "compliance": [...]}``"""

    brochure: Any = None
    floor_plan: Any = None
    compliance: list[Any] = field(default_factory=list)


DocumentShape = Union[LegacyArrayShape, CanonicalObjectShape]


def _decode_json_text(raw: Any) -> Any:
    """Some rows store the JSON column as text."""
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith(("[", "{")):
            try:
                return json.loads(text)
            except ValueError:
                return raw
    return raw


def detect_image_shape(raw: Any) -> ImageShape | None:
    """Classify a raw ``images`` value, or None when there is nothing to read."""
    raw = _decode_json_text(raw)
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        return StringArray([raw])
    if isinstance(raw, (list, tuple)):
        if all(isinstance(item, str) for item in raw):
            return StringArray(list(raw))
        return UrlObjectArray(list(raw))
    if isinstance(raw, dict):
        if "urls" in raw:
            return UrlsWrapper(list(raw.get("urls") or []))
        return KeyedSlots(dict(raw))
    return None


def detect_document_shape(raw: Any) -> DocumentShape | None:
    """Classify a raw ``documents`` value, or None when there is nothing to read."""
    raw = _decode_json_text(raw)
    if raw is None or raw == "":
        return None
    if isinstance(raw, (list, tuple)):
        return LegacyArrayShape(list(raw))
    if isinstance(raw, dict):
        return CanonicalObjectShape(
            brochure=raw.get("brochure"),
            floor_plan=raw.get("floorPlan", raw.get("floor_plan")),
            compliance=list(raw.get("compliance") or []),
        )
    return None
