import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bookverse_api.domain import RecommendationMode, UserId
from bookverse_api.schemas.book import BookRead

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class _CacheEntry:
    books: tuple[BookRead, ...]
    stored_at: float


class RecommendationCache:
    """
    Process-local map of computed recommendation lists with a fixed freshness window.
    Expired entries are dropped when read; nothing sweeps in the background.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._timer = timer
        self._entries: dict[str, _CacheEntry] = {}

    @staticmethod
    def make_key(mode: RecommendationMode, user_id: UserId | None, limit: int) -> str:
        return f"{mode}:{'' if user_id is None else user_id}:{limit}"

    def get(self, key: str) -> list[BookRead] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._timer() - entry.stored_at > self.ttl_seconds:
            self._entries.pop(key, None)
            return None
        return list(entry.books)

    def set(self, key: str, books: Sequence[BookRead]) -> None:
        self._entries[key] = _CacheEntry(books=tuple(books), stored_at=self._timer())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
