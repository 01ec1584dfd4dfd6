"""Process-scoped draft state with an injectable clock."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from property_editor.config import DraftConfig
from property_editor.logging import get_logger
from property_editor.models import PropertyRecord

logger = get_logger(__name__)

Clock = Callable[[], datetime]

# Draft key used for a record that has no identity yet
NEW_RECORD_KEY = "new"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Draft:
    key: str
    record: PropertyRecord
    expires_at: datetime


class DraftState:
    """Unsaved record drafts keyed by identity.

    Must be initialised with :meth:`init` (or used as a context manager)
    and released with :meth:`teardown`. Expiry is measured with the injected
    clock, so tests can advance time without sleeping.
    """

    def __init__(self, config: DraftConfig | None = None, clock: Clock = utc_now) -> None:
        self.config = config or DraftConfig()
        self.clock = clock
        self._drafts: dict[str, Draft] | None = None

    def init(self) -> None:
        self._drafts = {}

    def teardown(self) -> None:
        if self._drafts is not None:
            logger.debug("Dropping %d draft(s)", len(self._drafts))
        self._drafts = None

    def __enter__(self) -> "DraftState":
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.teardown()

    @property
    def _store(self) -> dict[str, Draft]:
        if self._drafts is None:
            raise RuntimeError("DraftState used before init()")
        return self._drafts

    def _expiry(self) -> datetime:
        return self.clock() + timedelta(seconds=self.config.ttl_seconds)

    def save(self, key: str | None, record: PropertyRecord) -> Draft:
        key = key or NEW_RECORD_KEY
        draft = Draft(key=key, record=copy.deepcopy(record), expires_at=self._expiry())
        self._store[key] = draft
        return draft

    def touch(self, key: str | None) -> bool:
        """Extend a live draft's expiry; False when missing or expired."""
        draft = self._live(key or NEW_RECORD_KEY)
        if draft is None:
            return False
        draft.expires_at = self._expiry()
        return True

    def restore(self, key: str | None) -> PropertyRecord | None:
        draft = self._live(key or NEW_RECORD_KEY)
        return None if draft is None else copy.deepcopy(draft.record)

    def discard(self, key: str | None) -> None:
        self._store.pop(key or NEW_RECORD_KEY, None)

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [key for key, draft in self._store.items() if draft.expires_at <= now]
        for key in expired:
            del self._store[key]
        return len(expired)

    def _live(self, key: str) -> Draft | None:
        draft = self._store.get(key)
        if draft is None:
            return None
        if draft.expires_at <= self.clock():
            logger.info("Draft %s expired", key)
            del self._store[key]
            return None
        return draft
