"""Interfaces of the external collaborators the editor talks to."""

from typing import Any, Protocol

from property_editor.clients.uploads import UploadFile
from property_editor.models import Organization


class PropertyAPI(Protocol):
    """Persistence API for property records."""

    async def create_property(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def update_property(self, property_id: str, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def get_property(self, property_id: str) -> dict[str, Any]: ...

    async def update_property_status(self, property_id: str, status: dict[str, str]) -> None: ...

    async def delete_property(self, property_id: str) -> None: ...


class UploadService(Protocol):
    """Asset storage returning a public ``{"url": ...}`` per upload."""

    async def upload_image(self, file: UploadFile) -> dict[str, Any]: ...

    async def upload_document(self, file: UploadFile) -> dict[str, Any]: ...


class OrganizationDirectory(Protocol):
    async def list_organizations(self, limit: int = 100) -> list[Organization]: ...
