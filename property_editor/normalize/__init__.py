"""Normalization of raw property data and submission payloads."""

from property_editor.normalize.documents import documents_payload, normalize_documents
from property_editor.normalize.images import images_payload, normalize_images
from property_editor.normalize.record import from_raw, resolve_organization, to_payload

__all__ = [
    "documents_payload",
    "from_raw",
    "images_payload",
    "normalize_documents",
    "normalize_images",
    "resolve_organization",
    "to_payload",
]
