"""Clients for the persistence API, upload service and organization directory."""

from property_editor.clients.base import OrganizationDirectory, PropertyAPI, UploadService
from property_editor.clients.uploads import UploadFile, check_document, check_image

__all__ = [
    "OrganizationDirectory",
    "PropertyAPI",
    "UploadFile",
    "UploadService",
    "check_document",
    "check_image",
]
