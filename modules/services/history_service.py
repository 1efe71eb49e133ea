"""Generation history tracking."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, List, Sequence

from modules.services.errors import PersistedStateCorrupt
from modules.services.storage_service import KeyValueStorage

logger = logging.getLogger(__name__)

HISTORY_KEY = "image_generation_history"
HISTORY_LIMIT = 3


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One successful generation, as shown in the history gallery."""

    id: str
    prompt: str
    style: str
    aspect_ratio: str
    image_url: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryEntry":
        """Build an entry from decoded JSON, raising PersistedStateCorrupt on bad shape."""
        if not isinstance(data, dict):
            raise PersistedStateCorrupt(f"History entry is not an object: {data!r:.80}")
        values = {}
        for name in ("id", "prompt", "style", "aspect_ratio", "image_url"):
            value = data.get(name)
            if not isinstance(value, str):
                raise PersistedStateCorrupt(f"History entry field '{name}' is missing or invalid")
            values[name] = value
        return cls(**values)


class GenerationHistoryService:
    """Bounded, most-recent-first history persisted as a JSON array."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = HISTORY_KEY,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        if not 1 <= limit <= HISTORY_LIMIT:
            raise ValueError(f"History limit must be between 1 and {HISTORY_LIMIT}")
        self.storage = storage
        self.key = key
        self.limit = limit

    def load(self) -> List[HistoryEntry]:
        """Return the stored history; corrupt content is discarded and removed."""
        try:
            raw = self.storage.load(self.key)
            if raw is None:
                return []
            return self._decode(raw)[: self.limit]
        except (PersistedStateCorrupt, UnicodeDecodeError) as exc:
            logger.warning("Failed to parse stored history, clearing it: %s", exc)
            self._discard()
            return []
        except OSError as exc:
            logger.warning("Could not read stored history, starting empty: %s", exc)
            return []

    def append(self, entry: HistoryEntry, current: Sequence[HistoryEntry]) -> List[HistoryEntry]:
        """Prepend ``entry``, keep the newest ``limit`` items and persist them."""
        updated = [entry, *current][: self.limit]
        payload = json.dumps([item.to_dict() for item in updated], ensure_ascii=False)
        self.storage.save(self.key, payload)
        return updated

    def _discard(self) -> None:
        try:
            self.storage.remove(self.key)
        except OSError as exc:
            logger.error("Could not remove corrupt history: %s", exc)

    def _decode(self, raw: str) -> List[HistoryEntry]:
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            raise PersistedStateCorrupt(f"History is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise PersistedStateCorrupt("History is not a JSON array")
        return [HistoryEntry.from_dict(item) for item in data]
