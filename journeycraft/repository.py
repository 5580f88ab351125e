# journeycraft/repository.py
"""Itinerary persistence over a minimal key-value store."""
import copy
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .data_models import TravelStyle
from .itinerary import Itinerary

logger = logging.getLogger(__name__)

ITINERARIES_KEY = "saved_itineraries"


class RepositoryError(RuntimeError):
    """The backing store could not be written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store, mostly for tests."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """A JSON object on disk (key -> string value), rewritten atomically on every change."""

    def __init__(self, path) -> None:
        self._path = Path(path)
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        if not self._path.exists():
            self._data = {}
            return self._data
        text = self._path.read_text(encoding="utf-8").strip()
        try:
            self._data = json.loads(text) if text else {}
        except json.JSONDecodeError:
            # keep the broken file around and start fresh
            backup = self._path.with_suffix(self._path.suffix + ".broken")
            backup.write_text(text, encoding="utf-8")
            logger.error("Store %s is corrupted; moved aside to %s", self._path, backup)
            self._data = {}
        return self._data

    def _flush(self, data: Dict[str, str]) -> None:
        """Write ``data`` to disk, then adopt it as the cached state."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        self._data = data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._flush({**self._load(), key: value})

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            self._flush({k: v for k, v in data.items() if k != key})


class ItineraryRepository:
    """Keeps every itinerary JSON-encoded under a single store key.

    Stored itineraries are private copies: callers get copies back and must
    call ``update`` to persist changes.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._itineraries: List[Itinerary] = self._load()

    def _load(self) -> List[Itinerary]:
        raw = self._store.get(ITINERARIES_KEY)
        if not raw:
            return []
        try:
            return [Itinerary.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load itineraries: %s", e)
            return []

    def _save(self, itineraries: List[Itinerary]) -> None:
        """Persist ``itineraries``; the in-memory list only changes once the write succeeds."""
        try:
            payload = json.dumps([i.to_dict() for i in itineraries])
            self._store.set(ITINERARIES_KEY, payload)
        except (OSError, TypeError, ValueError) as e:
            raise RepositoryError(f"Failed to save itineraries: {e}") from e
        self._itineraries = itineraries

    # --- CRUD ---

    def add(self, itinerary: Itinerary) -> Itinerary:
        self._save(self._itineraries + [copy.deepcopy(itinerary)])
        logger.debug("Added itinerary %s", itinerary.id)
        return itinerary

    def update(self, itinerary: Itinerary) -> bool:
        """Replace the stored itinerary with the same id; unknown ids are ignored."""
        for index, existing in enumerate(self._itineraries):
            if existing.id == itinerary.id:
                updated = list(self._itineraries)
                updated[index] = copy.deepcopy(itinerary)
                self._save(updated)
                return True
        logger.debug("Ignoring update for unknown itinerary %s", itinerary.id)
        return False

    def delete(self, itinerary_id: str) -> bool:
        remaining = [i for i in self._itineraries if i.id != itinerary_id]
        if len(remaining) == len(self._itineraries):
            return False
        self._save(remaining)
        return True

    def list(self) -> List[Itinerary]:
        return copy.deepcopy(self._itineraries)

    def get(self, itinerary_id: str) -> Optional[Itinerary]:
        found = next((i for i in self._itineraries if i.id == itinerary_id), None)
        return copy.deepcopy(found)

    def duplicate(self, itinerary: Itinerary) -> Itinerary:
        return self.add(itinerary.copy_as_duplicate())

    # --- Search and filter ---

    def search(self, query: str) -> List[Itinerary]:
        needle = (query or "").strip().lower()
        if not needle:
            return self.list()
        return [
            i for i in self.list()
            if needle in i.title.lower()
            or needle in i.description.lower()
            or any(needle in tag.lower() for tag in i.tags)
            or any(needle in d.name.lower() for d in i.destinations)
        ]

    def filter_by_style(self, style: Optional[TravelStyle]) -> List[Itinerary]:
        if style is None:
            return self.list()
        return [i for i in self.list() if i.travel_style == style]

    def eco_friendly(self) -> List[Itinerary]:
        return [i for i in self.list() if i.is_eco_friendly]

    def clear_all(self) -> None:
        try:
            self._store.remove(ITINERARIES_KEY)
        except OSError as e:
            raise RepositoryError(f"Failed to clear itineraries: {e}") from e
        self._itineraries = []
