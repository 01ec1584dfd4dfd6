"""In-memory collaborators for tests and local tooling.

Each fake records its calls, can be made to fail with a given exception,
and can hold its responses behind an ``asyncio.Event`` so tests control the
order in which concurrent calls resolve.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Iterable

from property_editor.clients.uploads import UploadFile, storage_name
from property_editor.exceptions import LoadError, PersistenceError
from property_editor.models import Organization


class _Controllable:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def _enter(self, name: str, argument: Any = None) -> None:
        self.calls.append((name, argument))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class InMemoryPropertyAPI(_Controllable):
    """Property persistence backed by a dict."""

    def __init__(self, records: dict[str, dict[str, Any]] | None = None) -> None:
        super().__init__()
        self.records: dict[str, dict[str, Any]] = copy.deepcopy(records or {})
        self._sequence = len(self.records)

    async def create_property(self, payload: dict[str, Any]) -> dict[str, Any]:
        await self._enter("create_property", payload)
        self._sequence += 1
        property_id = f"PROP-{self._sequence:06d}"
        record = {**copy.deepcopy(payload), "id": property_id, "displayCode": property_id}
        self.records[property_id] = record
        return copy.deepcopy(record)

    async def update_property(self, property_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        await self._enter("update_property", (property_id, payload))
        if property_id not in self.records:
            raise PersistenceError(f"Property {property_id} not found", kind="not_found", status_code=404)
        self.records[property_id].update(copy.deepcopy(payload))
        return copy.deepcopy(self.records[property_id])

    async def get_property(self, property_id: str) -> dict[str, Any]:
        await self._enter("get_property", property_id)
        if property_id not in self.records:
            raise LoadError(f"Property {property_id} not found")
        return copy.deepcopy(self.records[property_id])

    async def update_property_status(self, property_id: str, status: dict[str, str]) -> None:
        await self._enter("update_property_status", (property_id, status))
        if property_id not in self.records:
            raise PersistenceError(f"Property {property_id} not found", kind="not_found", status_code=404)
        self.records[property_id]["status"] = status["status"]

    async def delete_property(self, property_id: str) -> None:
        await self._enter("delete_property", property_id)
        if self.records.pop(property_id, None) is None:
            raise PersistenceError(f"Property {property_id} not found", kind="not_found", status_code=404)


class InMemoryUploadService(_Controllable):
    """Upload service returning deterministic URLs."""

    def __init__(self, base_url: str = "https://storage.example.com") -> None:
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.stored: dict[str, bytes] = {}

    async def _store(self, folder: str, file: UploadFile) -> dict[str, Any]:
        name = storage_name(file, now_ms=len(self.stored) + 1, property_id="upload")
        url = f"{self.base_url}/{folder}/{name}"
        self.stored[url] = file.content
        return {"url": url}

    async def upload_image(self, file: UploadFile) -> dict[str, Any]:
        await self._enter("upload_image", file.filename)
        return await self._store("images", file)

    async def upload_document(self, file: UploadFile) -> dict[str, Any]:
        await self._enter("upload_document", file.filename)
        return await self._store("documents", file)


class StaticOrganizationDirectory(_Controllable):
    def __init__(self, organizations: Iterable[Organization] = ()) -> None:
        super().__init__()
        self.organizations = list(organizations)

    async def list_organizations(self, limit: int = 100) -> list[Organization]:
        await self._enter("list_organizations", limit)
        return self.organizations[:limit]
