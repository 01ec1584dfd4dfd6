"""Edit session coordinating the record store with external collaborators."""

from __future__ import annotations

import asyncio
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from property_editor.clients.base import OrganizationDirectory, PropertyAPI, UploadService
from property_editor.clients.uploads import UploadFile, check_document, check_image
from property_editor.config import EditorConfig
from property_editor.exceptions import (
    LoadError,
    PersistenceError,
    PropertyEditorError,
    UploadError,
    ValidationError,
)
from property_editor.logging import get_logger
from property_editor.models import DocumentKind, OperationState, Organization, PropertyRecord
from property_editor.normalize.record import from_raw, to_payload
from property_editor.state import DraftState
from property_editor.store.record import RecordStore
from property_editor.validation import PROPERTY_STATUSES, validate_step, validate_submission

logger = get_logger(__name__)

OPERATIONS = ("record", "organizations", "image", "document", "submit")


class PropertyEditSession:
    """One editor session owning one property record.

    Field edits are synchronous. The only suspension points are calls to
    the collaborators, each tracked in :attr:`operations`. The record fetch and
    the organization fetch run concurrently; the store's load guard keeps a
    late response from replacing local edits.
    """

    def __init__(
        self,
        api: PropertyAPI,
        uploads: UploadService,
        directory: OrganizationDirectory,
        config: EditorConfig | None = None,
        store: RecordStore | None = None,
        drafts: DraftState | None = None,
    ) -> None:
        self.api = api
        self.uploads = uploads
        self.directory = directory
        self.config = config or EditorConfig()
        self.store = store or RecordStore()
        self.drafts = drafts
        self.organizations: list[Organization] = []
        self.operations: dict[str, OperationState] = {name: OperationState.IDLE for name in OPERATIONS}
        self.errors: dict[str, PropertyEditorError] = {}
        self._in_flight: set[str] = set()

    @property
    def record(self) -> PropertyRecord:
        return self.store.record

    def _begin(self, operation: str) -> None:
        self.operations[operation] = OperationState.PENDING
        self.errors.pop(operation, None)

    def _fail(self, operation: str, error: PropertyEditorError) -> None:
        self.operations[operation] = OperationState.FAILED
        self.errors[operation] = error

    def _resolve(self, operation: str) -> None:
        self.operations[operation] = OperationState.RESOLVED

    # Loading

    async def open(self, identity: str | None = None, stub: dict[str, Any] | None = None) -> PropertyRecord:
        """Enter create mode (no identity) or edit mode for ``identity``."""
        draft = self.drafts.restore(identity) if self.drafts is not None else None
        if draft is not None:
            self.store.restore(identity, draft)
        elif identity is None:
            self.store.reset()
        else:
            self.store.open(identity, stub, self.organizations)

        pending = [self._load_organizations()]
        if identity is not None and draft is None:
            pending.append(self._load_record(identity))
        await asyncio.gather(*pending)
        return self.store.record

    async def _load_record(self, identity: str) -> None:
        self._begin("record")
        try:
            raw = await self.api.get_property(identity)
        except PropertyEditorError as exc:
            error = exc if isinstance(exc, LoadError) else LoadError(str(exc))
            self._fail("record", error)
            logger.warning(
                "Could not load property %s, keeping stub data: %s",
                identity,
                exc,
                extra={"property_id": identity},
            )
            return
        self.store.load(identity, raw, self.organizations)
        self._resolve("record")

    async def _load_organizations(self) -> None:
        self._begin("organizations")
        try:
            organizations = await self.directory.list_organizations(limit=self.config.organization_limit)
        except PropertyEditorError as exc:
            error = exc if isinstance(exc, LoadError) else LoadError(str(exc))
            self._fail("organizations", error)
            logger.warning("Could not load organizations: %s", exc)
            return
        self.organizations = list(organizations)
        self.store.adopt_organizations(self.organizations)
        self._resolve("organizations")

    # Editing

    def apply(self, name: str, value: Any) -> list[str]:
        return self.store.apply(name, value)

    def fill_defaults(self, rng: random.Random | None = None) -> list[str]:
        return self.store.fill_defaults(rng=rng, organizations=self.organizations, locale=self.config.locale)

    def validate_step(self) -> list[str]:
        return validate_step(self.store.record)

    def save_draft(self) -> None:
        if self.drafts is not None:
            self.drafts.save(self.store.identity, self.store.record)

    def cancel(self) -> None:
        """Discard the record and any saved draft for it."""
        if self.drafts is not None:
            self.drafts.discard(self.store.identity)
        self.store.reset()

    # Uploads

    @asynccontextmanager
    async def _single_flight(self, kind: str) -> AsyncIterator[None]:
        if kind in self._in_flight:
            raise UploadError(f"{kind.capitalize()} upload already in progress", kind=kind)
        self._in_flight.add(kind)
        try:
            yield
        finally:
            self._in_flight.discard(kind)

    def _abandoned(self, generation: int, kind: str, file: UploadFile) -> bool:
        """True when the record the upload was started for has been discarded."""
        if generation == self.store.generation:
            return False
        logger.info("Discarding %s upload %s: its record was closed mid-upload", kind, file.filename)
        return True

    async def upload_image(self, file: UploadFile) -> str:
        """Upload an image and append its URL to the record."""
        check_image(file, self.config.upload)
        async with self._single_flight("image"):
            self._begin("image")
            generation = self.store.generation
            try:
                result = await self.uploads.upload_image(file)
            except PropertyEditorError as exc:
                error = exc if isinstance(exc, UploadError) else UploadError(str(exc), kind="image")
                self._fail("image", error)
                logger.error("Image upload failed for %s: %s", file.filename, exc)
                if error is exc:
                    raise
                raise error from exc
            url = result["url"]
            self._resolve("image")
            if self._abandoned(generation, "image", file):
                return url
            self.store.add_image(url)
            logger.info("Uploaded image %s", file.filename)
            return url

    async def upload_document(
        self,
        file: UploadFile,
        kind: DocumentKind | str = DocumentKind.COMPLIANCE,
        **meta: Any,
    ) -> str:
        """Upload a document and attach it to its canonical slot."""
        kind = DocumentKind(kind)
        check_document(file, self.config.upload)
        async with self._single_flight("document"):
            self._begin("document")
            generation = self.store.generation
            try:
                result = await self.uploads.upload_document(file)
            except PropertyEditorError as exc:
                error = exc if isinstance(exc, UploadError) else UploadError(str(exc), kind="document")
                self._fail("document", error)
                logger.error("Document upload failed for %s: %s", file.filename, exc)
                if error is exc:
                    raise
                raise error from exc
            url = result["url"]
            self._resolve("document")
            if self._abandoned(generation, "document", file):
                return url
            if kind is DocumentKind.BROCHURE:
                meta.setdefault("name", file.filename)
            elif kind is DocumentKind.FLOOR_PLAN:
                meta.setdefault("mime_type", file.content_type)
            self.store.set_document(kind, url, **meta)
            logger.info("Uploaded %s document %s", kind.value, file.filename)
            return url

    # Persistence

    async def submit(self) -> PropertyRecord:
        """Validate and persist the record; nothing is sent unless it is valid.

        On failure the local record is left exactly as it was.
        """
        record = self.store.snapshot()
        violations = validate_submission(record)
        if violations:
            logger.warning("Submission blocked: %s", violations)
            raise ValidationError(violations)

        payload = to_payload(record)
        identity = self.store.identity
        self._begin("submit")
        try:
            if identity is None:
                saved = await self.api.create_property(payload)
            else:
                saved = await self.api.update_property(identity, payload)
        except PersistenceError as exc:
            self._fail("submit", exc)
            logger.error(
                "Saving property %s failed (%s): %s",
                identity or "<new>",
                exc.kind,
                exc.details,
                extra={"property_id": identity},
            )
            raise
        self._resolve("submit")
        if self.drafts is not None:
            self.drafts.discard(identity)
        saved_id = identity or (saved or {}).get("id")
        logger.info("Saved property %s", saved_id, extra={"property_id": saved_id})
        return from_raw(saved, self.organizations) if saved else record

    async def update_status(self, status: str) -> None:
        if status not in PROPERTY_STATUSES:
            raise ValidationError([f"Status must be one of: {', '.join(PROPERTY_STATUSES)}"])
        identity = self.store.identity
        if identity is None:
            raise ValidationError(["Property must be saved before its status can change"])
        await self.api.update_property_status(identity, {"status": status})
        self.store.apply("status", status)

    async def delete(self) -> None:
        identity = self.store.identity
        if identity is None:
            raise ValidationError(["Property must be saved before it can be deleted"])
        await self.api.delete_property(identity)
        logger.info("Deleted property %s", identity, extra={"property_id": identity})
        self.cancel()
