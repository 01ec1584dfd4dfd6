"""In-memory record store and load guard."""

from property_editor.store.record import LoadGuard, RecordStore

__all__ = ["LoadGuard", "RecordStore"]
