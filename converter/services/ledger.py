"""Conversion history and favorite pairs, backed by a pluggable store.

Mutations are applied to the in-memory view first and then saved. A failed
save leaves the in-memory view as mutated, marks the collection as unsynced
and raises :class:`PersistenceFailure`; :meth:`Ledger.flush` retries.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence

from converter.errors import DuplicateFavorite, NotFound, PersistenceFailure
from converter.logging import ledger_log_extra
from converter.services.fx_conversion import ConversionRecord, normalize_currency

logger = logging.getLogger(__name__)

HISTORY = "history"
FAVORITES = "favorites"


@dataclass(frozen=True)
class FavoritePair:
    id: str
    from_currency: str
    to_currency: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_currency", normalize_currency(self.from_currency))
        object.__setattr__(self, "to_currency", normalize_currency(self.to_currency))

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_currency, self.to_currency)


class LedgerStore(Protocol):
    """Persistence collaborator; implementations raise PersistenceFailure on any storage error."""

    def load_history(self) -> Sequence[ConversionRecord]: ...

    def save_history(self, records: Sequence[ConversionRecord]) -> None: ...

    def load_favorites(self) -> Sequence[FavoritePair]: ...

    def save_favorites(self, pairs: Sequence[FavoritePair]) -> None: ...


def _new_favorite_id() -> str:
    return uuid.uuid4().hex


class Ledger:
    """Most-recent-first conversion history plus a deduplicated list of favorite pairs."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        history_limit: Optional[int] = 100,
        id_factory: Callable[[], str] = _new_favorite_id,
    ) -> None:
        if history_limit is not None and history_limit < 1:
            raise ValueError("history_limit must be positive or None")
        self._store = store
        self._history_limit = history_limit
        self._id_factory = id_factory
        self._history: List[ConversionRecord] = []
        self._favorites: List[FavoritePair] = []
        self._loaded = False
        self._unsynced: set[str] = set()

    @property
    def history_limit(self) -> Optional[int]:
        return self._history_limit

    @property
    def unsynced(self) -> frozenset[str]:
        """Collections whose in-memory state has not reached the store."""

        return frozenset(self._unsynced)

    def load(self) -> None:
        """(Re)load both collections from the store, discarding the in-memory view."""

        history = list(self._store.load_history())
        favorites = list(self._store.load_favorites())
        self._history = self._truncate(history)
        self._favorites = favorites
        self._unsynced.clear()
        self._loaded = True

    def list(self) -> List[ConversionRecord]:
        self._ensure_loaded()
        return list(self._history)

    def append(self, record: ConversionRecord) -> ConversionRecord:
        self._ensure_loaded()
        self._history.insert(0, record)
        self._history = self._truncate(self._history)
        self._save(HISTORY)
        return record

    def favorites(self) -> List[FavoritePair]:
        self._ensure_loaded()
        return list(self._favorites)

    def add_favorite(self, from_currency: str, to_currency: str) -> FavoritePair:
        """Save the ordered pair; ``A -> B`` and ``B -> A`` are distinct favorites."""

        self._ensure_loaded()
        source = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        if any(pair.key == (source, target) for pair in self._favorites):
            raise DuplicateFavorite(source, target)

        pair = FavoritePair(id=self._id_factory(), from_currency=source, to_currency=target)
        self._favorites.append(pair)
        self._save(FAVORITES)
        return pair

    def remove_favorite(self, favorite_id: str) -> FavoritePair:
        self._ensure_loaded()
        for index, pair in enumerate(self._favorites):
            if pair.id == favorite_id:
                break
        else:
            raise NotFound(f"Favorite '{favorite_id}' not found.", payload={"id": favorite_id})

        del self._favorites[index]
        self._save(FAVORITES)
        return pair

    def flush(self) -> None:
        """Retry saving every unsynced collection."""

        for collection in sorted(self._unsynced):
            self._save(collection)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _truncate(self, records: List[ConversionRecord]) -> List[ConversionRecord]:
        if self._history_limit is None:
            return records
        return records[: self._history_limit]

    def _save(self, collection: str) -> None:
        if collection == HISTORY:
            items: Sequence[object] = tuple(self._history)
            writer: Callable[..., None] = self._store.save_history
        else:
            items = tuple(self._favorites)
            writer = self._store.save_favorites

        try:
            writer(items)
        except PersistenceFailure as exc:
            self._unsynced.add(collection)
            logger.error(
                "Ledger save failed; in-memory %s kept",
                collection,
                extra=ledger_log_extra(
                    event="ledger.save",
                    collection=collection,
                    status="error",
                    size=len(items),
                    error=exc.message,
                ),
            )
            raise

        self._unsynced.discard(collection)
        logger.debug(
            "Ledger %s saved",
            collection,
            extra=ledger_log_extra(
                event="ledger.save", collection=collection, status="success", size=len(items)
            ),
        )
