"""Resumable offset bookkeeping for incremental imports.

Each library keeps two persisted counters: the main cursor (`offset`, `total`,
`status`, optionally `items_imported`) that drives the forward scan through
the whole collection, and a secondary offset used while catching up on items
added since the last full import ("delta" mode).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from overdrive_import.config import settings
from overdrive_import.models import ImportCursorState, SearchQuery
from overdrive_import.utils.persistence import KeyValueStore

SORT_ASC = "dateadded:asc"
SORT_DESC = "dateadded:desc"


def clamp_page_size(value: int | str | None) -> int:
    """Clamp a requested page size to [1, max_page_size]; empty or zero means the default."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return settings.default_page_size
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid page size: {value!r}") from None
    if size == 0:
        return settings.default_page_size
    return max(1, min(size, settings.max_page_size))


@dataclass(frozen=True)
class ImportMode:
    """How the next page is chosen: forward scan, fixed page, or new items."""

    kind: Literal["sequential", "page", "delta"] = "sequential"
    page: int | None = None

    @classmethod
    def parse(cls, value: object) -> ImportMode:
        """Interpret a mode selector.

        - Falsy values and the string "false" select sequential mode.
        - Integers and numeric strings select that page.
        - Anything else selects delta mode.
        """
        if not value or (isinstance(value, str) and value.strip().lower() == "false"):
            return cls()
        if isinstance(value, bool):
            return cls("delta")
        if isinstance(value, int) or (isinstance(value, str) and value.strip().isdigit()):
            return cls("page", int(value))
        return cls("delta")

    @property
    def overrides_completion(self) -> bool:
        return self.kind != "sequential"


class ImportCursor:
    """Load, query and advance the per-library import counters."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def state_key(library_id: str | int) -> str:
        return f"overdrive_results_count_{library_id}"

    @staticmethod
    def delta_key(library_id: str | int) -> str:
        return f"new_overdrive_results_count_{library_id}"

    def has_state(self, library_id: str | int) -> bool:
        return bool(self.store.get(self.state_key(library_id)))

    def load(self, library_id: str | int) -> ImportCursorState:
        """Return the persisted cursor, or a fresh one when none exists."""
        data = self.store.get(self.state_key(library_id))
        if not data:
            return ImportCursorState()
        return ImportCursorState.from_dict(data)

    def save(self, library_id: str | int, state: ImportCursorState) -> None:
        self.store.set(self.state_key(library_id), state.to_dict())

    @staticmethod
    def is_complete(state: ImportCursorState, page_size: int, override_active: bool) -> bool:
        """True when the offset has reached the last page of `total`."""
        if override_active:
            return False
        return math.ceil(state.offset / page_size) == math.ceil(state.total / page_size)

    def mark_completed(self, library_id: str | int, state: ImportCursorState) -> None:
        state.status = "completed"
        self.save(library_id, state)
        logger.info("Import for library {} completed at offset {}", library_id, state.offset)

    @staticmethod
    def remaining_new_items(state: ImportCursorState, page_size: int) -> int:
        """Estimate how many newly added items still need importing."""
        if state.items_imported is None:
            return page_size
        return state.total - state.items_imported

    def compute_query(
        self,
        library_id: str | int,
        state: ImportCursorState,
        mode: ImportMode,
        page_size: int,
    ) -> SearchQuery:
        """Build the search query for the next page under `mode`.

        In delta mode the secondary offset is cleared once the remaining new
        items fit in a single page.
        """
        if mode.kind == "page":
            offset = max(mode.page - 1, 0) * page_size
            return SearchQuery(limit=page_size, offset=offset, sort=SORT_DESC)
        if mode.kind == "delta":
            offset = int(self.store.get(self.delta_key(library_id)) or 0)
            if self.remaining_new_items(state, page_size) <= page_size:
                self.store.delete(self.delta_key(library_id))
            return SearchQuery(limit=page_size, offset=offset, sort=SORT_DESC)
        return SearchQuery(limit=page_size, offset=state.offset, sort=SORT_ASC)

    def update(self, library_id: str | int, state: ImportCursorState, new_total: int) -> None:
        """Persist the latest `totalItems`; offsets are moved by `advance`."""
        state.total = new_total
        state.status = "in_progress"
        self.save(library_id, state)

    def advance(
        self,
        library_id: str | int,
        state: ImportCursorState,
        mode: ImportMode,
        query: SearchQuery,
        fetched: int,
    ) -> None:
        """Move the counter used by `mode` past the records just imported.

        Sequential mode moves the main offset (never past `total`); delta mode
        moves the secondary offset while catch-up continues; page mode moves
        nothing.
        """
        if mode.kind == "sequential":
            state.offset = min(state.offset + fetched, max(state.total, state.offset))
            self.save(library_id, state)
        elif mode.kind == "delta":
            if self.remaining_new_items(state, query.limit) > query.limit:
                self.store.set(self.delta_key(library_id), query.offset + fetched)
        logger.debug("Cursor for library {} now {}", library_id, state)

    def record_items_imported(self, library_id: str | int, count: int) -> ImportCursorState:
        """Store the number of items the import tool reports as imported."""
        state = self.load(library_id)
        state.items_imported = int(count)
        self.save(library_id, state)
        return state
