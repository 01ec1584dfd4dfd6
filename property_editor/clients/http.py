"""REST clients for the property API and the upload service."""

from __future__ import annotations

import json
from typing import Any

import httpx

from property_editor.clients.uploads import UploadFile
from property_editor.config import ApiConfig, UploadConfig
from property_editor.exceptions import LoadError, PersistenceError, UploadError
from property_editor.logging import get_logger
from property_editor.models import Organization

logger = get_logger(__name__)

VALIDATION_STATUS = {400, 422}
NOT_IMPLEMENTED_STATUS = {405, 501}


def unwrap(body: Any) -> Any:
    """Entity from ``{"data": {"data": X}}``, ``{"data": X}`` or ``X``."""
    if isinstance(body, dict) and "data" in body:
        inner = body["data"]
        if isinstance(inner, dict) and "data" in inner:
            return inner["data"]
        return inner
    return body


def classify_status(status_code: int) -> str:
    if status_code in VALIDATION_STATUS:
        return "validation"
    if status_code == 404:
        return "not_found"
    if status_code in NOT_IMPLEMENTED_STATUS:
        return "not_implemented"
    return "server"


def error_details(body: Any) -> list[str]:
    """Readable messages from an error body's ``message``/``errors`` field."""
    if isinstance(body, dict):
        body = body.get("message") or body.get("errors") or body.get("error") or body
    if isinstance(body, list):
        return [item if isinstance(item, str) else json.dumps(item) for item in body]
    if isinstance(body, dict):
        return [f"{field}: {json.dumps(message)}" for field, message in body.items()]
    if body in (None, ""):
        return []
    return [str(body)]


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Shared ``httpx.AsyncClient`` handling for the REST clients."""

    def __init__(self, config: ApiConfig | None = None, client: httpx.AsyncClient | None = None) -> None:
        self.config = config or ApiConfig()
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self.config.headers,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, action: str, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.error("%s %s unreachable: %s", method, path, exc)
            raise PersistenceError(
                f"Failed to {action}: backend unreachable ({exc})", kind="unreachable"
            ) from exc

        if response.status_code >= 400:
            kind = classify_status(response.status_code)
            details = error_details(_json_or_text(response))
            logger.error(
                "%s %s failed with %s (%s): %s", method, path, response.status_code, kind, details
            )
            raise PersistenceError(
                f"Failed to {action}: HTTP {response.status_code}",
                kind=kind,
                status_code=response.status_code,
                details=details,
            )
        if not response.content:
            return None
        return unwrap(_json_or_text(response))


class RestPropertyAPI(ApiClient):
    """Persistence API and organization directory over REST."""

    async def create_property(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("create property", "POST", "/properties", json=payload)

    async def update_property(self, property_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "update property", "PATCH", f"/properties/{property_id}", json=payload
        )

    async def get_property(self, property_id: str) -> dict[str, Any]:
        try:
            return await self._request("load property", "GET", f"/properties/{property_id}")
        except PersistenceError as exc:
            raise LoadError(str(exc)) from exc

    async def update_property_status(self, property_id: str, status: dict[str, str]) -> None:
        await self._request(
            "update property status",
            "PATCH",
            f"/properties/{property_id}",
            json={"status": status["status"]},
        )

    async def delete_property(self, property_id: str) -> None:
        await self._request("delete property", "DELETE", f"/properties/{property_id}")

    async def list_organizations(self, limit: int = 100) -> list[Organization]:
        try:
            body = await self._request(
                "load organizations", "GET", "/organizations", params={"limit": limit}
            )
        except PersistenceError as exc:
            raise LoadError(str(exc)) from exc
        if isinstance(body, dict):
            body = body.get("organizations") or body.get("items") or []
        return [Organization.from_dict(item) for item in body or [] if isinstance(item, dict)]


class RestUploadService(ApiClient):
    """Multipart uploads to ``/upload/{image,document}/{category}``."""

    def __init__(
        self,
        config: ApiConfig | None = None,
        upload_config: UploadConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, client)
        self.upload_config = upload_config or UploadConfig()

    async def _upload(self, kind: str, category: str, file: UploadFile) -> dict[str, Any]:
        files = {"file": (file.filename, file.content, file.content_type or "application/octet-stream")}
        try:
            body = await self._request(f"upload {kind}", "POST", f"/upload/{kind}/{category}", files=files)
        except PersistenceError as exc:
            raise UploadError(str(exc), kind=kind) from exc
        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            raise UploadError(f"Upload service returned no url for {file.filename}", kind=kind)
        return {"url": url}

    async def upload_image(self, file: UploadFile) -> dict[str, Any]:
        return await self._upload("image", self.upload_config.image_category, file)

    async def upload_document(self, file: UploadFile) -> dict[str, Any]:
        return await self._upload("document", self.upload_config.document_category, file)
