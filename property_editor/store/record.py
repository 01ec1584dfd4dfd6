"""Record store holding the single in-progress property record."""

from __future__ import annotations

import copy
import random
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable

from property_editor.exceptions import UnknownFieldError
from property_editor.generators.fill import fill_defaults
from property_editor.logging import get_logger
from property_editor.models import (
    Brochure,
    ComplianceDocument,
    DocumentKind,
    FloorPlan,
    Organization,
    PropertyRecord,
    UnitType,
)
from property_editor.normalize.record import from_raw, resolve_organization
from property_editor.rules import DerivationEngine

logger = get_logger(__name__)

# Store state before anything has been opened or loaded
_UNBOUND = "<unbound>"

LIST_COLLECTIONS = ("features", "amenities", "property_features")


@dataclass
class LoadGuard:
    """One-shot marker per record identity.

    Once an identity is marked, no fetch response may replace the record for
    that identity again; only edits and derivation rules change it.
    """

    _loaded: set[str] = field(default_factory=set)

    def is_loaded(self, identity: str) -> bool:
        return identity in self._loaded

    def mark(self, identity: str) -> bool:
        """Mark ``identity`` loaded; False when it already was."""
        if identity in self._loaded:
            return False
        self._loaded.add(identity)
        return True

    def clear(self) -> None:
        self._loaded.clear()


class RecordStore:
    """Single-writer store for the record being edited.

    Every mutation runs on a copy and replaces the committed record only once
    the full cascade has finished, so callers never see intermediate states
    and a failing mutation leaves the record untouched.
    """

    def __init__(self, engine: DerivationEngine | None = None) -> None:
        self.engine = engine or DerivationEngine()
        self.guard = LoadGuard()
        self._record = PropertyRecord()
        self._identity: str | None = _UNBOUND
        self._generation = 0

    @property
    def record(self) -> PropertyRecord:
        return self._record

    @property
    def identity(self) -> str | None:
        """Identity being edited; None in create mode."""
        return None if self._identity == _UNBOUND else self._identity

    @property
    def is_create_mode(self) -> bool:
        return self.identity is None

    @property
    def generation(self) -> int:
        """Bumped whenever the record is discarded or replaced by another one."""
        return self._generation

    def snapshot(self) -> PropertyRecord:
        return copy.deepcopy(self._record)

    @contextmanager
    def _mutation(self) -> Iterator[PropertyRecord]:
        draft = copy.deepcopy(self._record)
        yield draft
        self._record = draft

    # Lifecycle

    def reset(self) -> PropertyRecord:
        """Discard the record and guard and switch to create mode."""
        self.guard.clear()
        self._record = PropertyRecord()
        self._identity = None
        self._generation += 1
        logger.info("Record store reset to create mode")
        return self._record

    def open(
        self,
        identity: str,
        stub: dict[str, Any] | None = None,
        organizations: Iterable[Organization] | None = None,
    ) -> PropertyRecord:
        """Start editing ``identity``, seeded from stub data while the full fetch runs."""
        if identity == self._identity:
            return self._record
        self.guard.clear()
        self._identity = identity
        self._record = from_raw(stub, organizations)
        self._generation += 1
        logger.info("Opened property %s for editing", identity)
        return self._record

    def load(
        self,
        identity: str,
        raw: dict[str, Any] | None,
        organizations: Iterable[Organization] | None = None,
    ) -> PropertyRecord:
        """Store a fetched record unless it is stale or already loaded.

        An unbound store adopts ``identity``. Once an identity is bound,
        responses for any other identity are discarded, so switching to a
        new identity must go through :meth:`open` (or :meth:`reset`) first.
        """
        if self._identity == _UNBOUND:
            self._identity = identity
        elif identity != self._identity:
            logger.info("Discarding response for abandoned property %s", identity)
            return self._record
        if self.guard.is_loaded(identity):
            logger.debug("Property %s already loaded; keeping local edits", identity)
            return self._record

        organizations = list(organizations or [])
        record = from_raw(raw, organizations)
        if not record.organization_id and self._record.organization_id:
            # Chosen from the directory before the record arrived
            record.organization_id = resolve_organization(self._record.organization_id, organizations)
        self._record = record
        self.guard.mark(identity)
        logger.info("Loaded property %s", identity)
        return self._record

    def restore(self, identity: str | None, record: PropertyRecord) -> PropertyRecord:
        """Resume a saved draft; for an identity it counts as the one load."""
        self.guard.clear()
        self._identity = identity
        self._record = copy.deepcopy(record)
        self._generation += 1
        if identity is not None:
            self.guard.mark(identity)
        logger.info("Restored draft for %s", identity or "new property")
        return self._record

    # Mutations

    def apply(self, name: str, value: Any) -> list[str]:
        """Set one field and run its derivation rule; returns changed field names."""
        with self._mutation() as draft:
            changed = self.engine.apply(draft, name, value)
        return changed

    def adopt_organizations(self, organizations: Iterable[Organization]) -> list[str]:
        """Resolve the record's organization once the directory arrives.

        Selects the first organization when none is set yet; an existing value
        is only rewritten to the directory's reference for the same organization.
        """
        organizations = list(organizations)
        current = self._record.organization_id
        if current:
            resolved = resolve_organization(current, organizations)
        elif organizations:
            resolved = organizations[0].reference
        else:
            return []
        if resolved == current:
            return []
        with self._mutation() as draft:
            draft.organization_id = resolved
        return ["organization_id"]

    def fill_defaults(
        self,
        rng: random.Random | None = None,
        organizations: Iterable[Organization] | None = None,
        locale: str = "en_US",
        today: Callable[[], date] = date.today,
    ) -> list[str]:
        with self._mutation() as draft:
            _, changed = fill_defaults(draft, rng=rng, organizations=organizations, locale=locale, today=today)
        return changed

    def set_location(self, latitude: float, longitude: float) -> None:
        with self._mutation() as draft:
            draft.location_latitude = f"{latitude:.6f}"
            draft.location_longitude = f"{longitude:.6f}"

    def add_unit_type(self, type: str, size: str, count: str | int) -> bool:
        """Append a manual unit row; all three values are required."""
        if not (str(type).strip() and str(size).strip() and str(count).strip()):
            return False
        with self._mutation() as draft:
            draft.unit_types.append(UnitType(type=str(type), size=str(size), count=str(count)))
        return True

    def update_unit_type(self, index: int, **values: Any) -> None:
        with self._mutation() as draft:
            unit = draft.unit_types[index]
            for key, value in values.items():
                if key not in ("type", "size", "count"):
                    raise UnknownFieldError(f"Unknown unit type field: {key}")
                setattr(unit, key, str(value))

    def remove_unit_type(self, index: int) -> None:
        with self._mutation() as draft:
            del draft.unit_types[index]

    def add_item(self, collection: str, value: str) -> bool:
        """Append a trimmed entry to features, amenities or property_features."""
        if collection not in LIST_COLLECTIONS:
            raise UnknownFieldError(f"Not an editable list: {collection}")
        value = value.strip()
        if not value:
            return False
        with self._mutation() as draft:
            getattr(draft, collection).append(value)
        return True

    def remove_item(self, collection: str, index: int) -> None:
        if collection not in LIST_COLLECTIONS:
            raise UnknownFieldError(f"Not an editable list: {collection}")
        with self._mutation() as draft:
            del getattr(draft, collection)[index]

    def add_image(self, url: str) -> None:
        with self._mutation() as draft:
            if url not in draft.images:
                draft.images.append(url)

    def remove_image(self, index: int) -> None:
        with self._mutation() as draft:
            del draft.images[index]

    def set_document(self, kind: DocumentKind | str, url: str, **meta: Any) -> None:
        """Attach an uploaded document to its canonical slot."""
        kind = DocumentKind(kind)
        with self._mutation() as draft:
            documents = draft.documents
            if kind is DocumentKind.BROCHURE:
                documents.brochure = Brochure(url=url, name=meta.get("name", ""), notes=meta.get("notes", ""))
            elif kind is DocumentKind.FLOOR_PLAN:
                documents.floor_plan = FloorPlan(
                    url=url, version=meta.get("version", ""), mime_type=meta.get("mime_type", "")
                )
            else:
                documents.compliance.append(
                    ComplianceDocument(
                        url=url,
                        type=meta.get("type", "other"),
                        issued_at=meta.get("issued_at"),
                        issued_by=meta.get("issued_by"),
                    )
                )

    def remove_document(self, kind: DocumentKind | str, index: int | None = None) -> None:
        kind = DocumentKind(kind)
        with self._mutation() as draft:
            documents = draft.documents
            if kind is DocumentKind.BROCHURE:
                documents.brochure = None
            elif kind is DocumentKind.FLOOR_PLAN:
                documents.floor_plan = None
            elif index is None:
                documents.compliance.clear()
            else:
                del documents.compliance[index]
