"""Optional re-ranking of a candidate pool by a hosted text-generation model.

Every failure here is soft: the caller receives ``None`` and keeps the
heuristic order.
"""

import json
import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from bookverse_api.config import Settings
from bookverse_api.domain import BookId
from bookverse_api.schemas.book import BookRead
from bookverse_api.services.preference_signals import PreferenceSignals

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDER = "huggingface"
SYNOPSIS_MAX_LENGTH = 320
NO_HISTORY_PROFILE = (
    "No prior favorites or reviews. Suggest accessible, high-quality books across popular genres."
)
GENERATION_PARAMETERS: dict[str, Any] = {
    "max_new_tokens": 420,
    "temperature": 0.2,
    "top_p": 0.9,
    "return_full_text": False,
}

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_WHITESPACE = re.compile(r"\s+")


class RankingResponseError(ValueError):
    """Raised when the model's reply cannot be turned into a ranking."""

    pass


@dataclass
class RankingResult:
    order: list[BookId]
    reasons: dict[BookId, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedRankingEntry:
    book_id: BookId
    reason: str | None = None


class RankingEntryPayload(BaseModel):
    """Object-shaped entry of the model's JSON array. Field values arrive untyped."""

    id: Any = None
    bookId: Any = None
    title: Any = None
    reason: Any = None
    explanation: Any = None

    model_config = ConfigDict(extra="ignore")


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[: max_length - 3]}..."


def top_keys(weights: dict[str, float], limit: int) -> list[str]:
    return [key for key, _ in sorted(weights.items(), key=lambda item: item[1], reverse=True)][
        :limit
    ]


def build_profile_summary(signals: PreferenceSignals) -> str:
    segments: list[str] = []
    genres = top_keys(signals.genre_weights, 5)
    authors = top_keys(signals.author_weights, 5)
    keywords = top_keys(signals.keyword_weights, 10)
    if genres:
        segments.append(f"Preferred genres: {', '.join(genres)}")
    if authors:
        segments.append(f"Frequent authors: {', '.join(authors)}")
    if keywords:
        segments.append(f"Notable themes/keywords: {', '.join(keywords)}")
    if signals.recent_titles:
        segments.append(f"Recently reviewed titles: {', '.join(signals.recent_titles[:5])}")
    if not segments:
        segments.append(NO_HISTORY_PROFILE)
    return "\n".join(segments)


def serialize_candidate(book: BookRead) -> dict[str, Any]:
    synopsis = truncate(book.description or "No description available.", SYNOPSIS_MAX_LENGTH)
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "genres": ", ".join(book.genres[:4]) if book.genres else "unknown",
        "avgRating": round(book.avg_rating, 2),
        "reviewCount": book.review_count,
        "summary": _WHITESPACE.sub(" ", synopsis).strip(),
    }


def build_prompt(books: Sequence[BookRead], profile_summary: str, limit: int) -> str:
    instructions = (
        f"You are BookVerse's AI librarian. Choose the top {limit} books that best match the "
        "reader profile. Respond ONLY with a JSON array. Each array item must be an object with "
        "fields: id (number), title (string), and reason (brief string explaining the match). "
        "Do not include extra commentary."
    )
    candidates = json.dumps([serialize_candidate(book) for book in books], indent=2)
    return (
        f"{instructions}\n\nReader profile:\n{profile_summary}\n\n"
        f"Candidate books (JSON objects):\n{candidates}\n\n"
        "Return a JSON array sorted from best to worst recommendation."
    )


def extract_generated_text(payload: Any) -> str:
    """Pulls the generated text out of the provider's JSON reply."""
    first = payload[0] if isinstance(payload, list) and payload else payload
    if isinstance(payload, list) and isinstance(first, str):
        return first
    if isinstance(first, dict):
        for key in ("generated_text", "text"):
            if first.get(key):
                return str(first[key])
    return json.dumps(payload)


def parse_ranking_array(raw_text: str) -> list[Any]:
    match = _JSON_ARRAY.search(raw_text)
    if match is None:
        raise RankingResponseError("Could not locate JSON array in model response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise RankingResponseError(f"Model response is not valid JSON: {exc}") from exc
    if not isinstance(parsed, list):
        raise RankingResponseError("Model response did not parse into an array")
    return parsed


def _as_book_id(value: Any) -> int | None:
    """Integral numbers and numeric strings, so `3`, `3.0` and `"3"` all name book 3."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return int(number) if number.is_integer() else None


def _as_reason(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def resolve_entry(
    entry: Any, known_ids: set[BookId], title_index: dict[str, BookId]
) -> ResolvedRankingEntry | None:
    """
    Normalizes a bare id, a bare title, or an object carrying an id or a title.
    Entries that match no known book resolve to None.
    """
    book_id: int | None = None
    reason: str | None = None

    if isinstance(entry, bool):
        return None
    if isinstance(entry, int | float):
        book_id = _as_book_id(entry)
    elif isinstance(entry, str):
        book_id = _as_book_id(entry)
        if book_id not in known_ids:
            book_id = title_index.get(entry.strip().lower())
    elif isinstance(entry, dict):
        payload = RankingEntryPayload.model_validate(entry)
        book_id = _as_book_id(payload.id if payload.id is not None else payload.bookId)
        if book_id not in known_ids and isinstance(payload.title, str):
            book_id = title_index.get(payload.title.strip().lower())
        reason = _as_reason(payload.reason) or _as_reason(payload.explanation)

    if book_id is None or book_id not in known_ids:
        return None
    return ResolvedRankingEntry(book_id=BookId(book_id), reason=reason)


def resolve_ranking(entries: Sequence[Any], books: Sequence[BookRead]) -> RankingResult:
    known_ids = {book.id for book in books}
    title_index: dict[str, BookId] = {}
    for book in books:
        title_index.setdefault(book.title.lower(), book.id)

    result = RankingResult(order=[])
    for entry in entries:
        resolved = resolve_entry(entry, known_ids, title_index)
        if resolved is None or resolved.book_id in result.order:
            continue
        result.order.append(resolved.book_id)
        if resolved.reason:
            result.reasons[resolved.book_id] = resolved.reason
    return result


def merge_ranking(pool: Sequence[BookRead], order: Sequence[BookId]) -> list[BookRead]:
    """Ranked books first, then the rest of the pool in its original order."""
    by_id = {book.id: book for book in pool}
    ranked: list[BookRead] = []
    placed: set[BookId] = set()
    for book_id in order:
        book = by_id.get(book_id)
        if book is not None and book_id not in placed:
            ranked.append(book)
            placed.add(book_id)
    if not ranked:
        return list(pool)
    return ranked + [book for book in pool if book.id not in placed]


class HuggingFaceRanker:
    def __init__(
        self,
        api_url: str,
        api_key: str | None,
        provider: str | None = SUPPORTED_PROVIDER,
        timeout_ms: int = 4000,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.provider = (provider or "").lower()
        self.timeout_ms = timeout_ms
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "HuggingFaceRanker":
        return cls(
            api_url=settings.resolved_llm_api_url,
            api_key=settings.llm_api_key,
            provider=settings.llm_provider,
            timeout_ms=settings.llm_timeout_ms,
        )

    @property
    def enabled(self) -> bool:
        return self.provider == SUPPORTED_PROVIDER and bool(self.api_key)

    def rank(
        self, books: Sequence[BookRead], profile_summary: str, limit: int
    ) -> RankingResult | None:
        if not self.enabled or not books:
            return None

        body = {
            "inputs": build_prompt(books, profile_summary, limit),
            "parameters": GENERATION_PARAMETERS,
            "options": {"wait_for_model": True},
        }
        try:
            raw_text = self._generate(body)
            ranking = resolve_ranking(parse_ranking_array(raw_text), books)
        except (httpx.HTTPError, RankingResponseError) as exc:
            logger.warning("Falling back to heuristic recommendations: %s", exc)
            return None

        logger.info(
            "External ranking applied", extra={"ranked": len(ranking.order), "pool": len(books)}
        )
        return ranking

    def _generate(self, body: dict[str, Any]) -> str:
        """One provider call, bounded end to end by `timeout_ms`, including a slow body."""
        deadline = time.monotonic() + self.timeout_ms / 1000
        if self._http_client is not None:
            raw = self._post_within_deadline(self._http_client, body, deadline)
        else:
            with httpx.Client() as client:
                raw = self._post_within_deadline(client, body, deadline)

        try:
            payload = json.loads(raw)
        except ValueError:
            return raw.decode("utf-8", errors="replace")
        return extract_generated_text(payload)

    def _post_within_deadline(
        self, client: httpx.Client, body: dict[str, Any], deadline: float
    ) -> bytes:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        # per-phase limits; the deadline checks below bound the body as a whole
        timeout = httpx.Timeout(self._remaining(deadline))
        with client.stream(
            "POST", self.api_url, json=body, headers=headers, timeout=timeout
        ) as response:
            if not response.is_success:
                raise RankingResponseError(
                    f"Provider responded with status {response.status_code}"
                )
            chunks: list[bytes] = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                self._remaining(deadline)
            self._remaining(deadline)
        return b"".join(chunks)

    def _remaining(self, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise RankingResponseError(f"Provider call exceeded {self.timeout_ms} ms")
        return remaining
