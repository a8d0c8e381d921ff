"""Named saved locations with change notifications."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from ..schemas.location import Location
from .location import require_valid_coordinates

logger = logging.getLogger(__name__)

Observer = Callable[[str, Optional[Location]], None]


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> List[str]: ...


class LocationProvider(Protocol):
    """Source of the device's current position, when the host has one."""

    def current_location(self) -> Optional[Location]: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._data)


class LocationBook:
    """Saved locations stored as JSON in a ``KeyValueStore``.

    Observers receive ``(name, location)`` on save and ``(name, None)`` on
    delete. An observer that raises is logged and does not stop the others.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, provider: Optional[LocationProvider] = None):
        self._store: KeyValueStore = store if store is not None else InMemoryKeyValueStore()
        self._provider = provider
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _notify(self, name: str, location: Optional[Location]) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(name, location)
            except Exception:
                logger.exception("location observer failed for %s", name)

    def save(self, name: str, location: Location) -> Location:
        require_valid_coordinates(location.latitude, location.longitude)
        self._store.set(name, location.model_dump_json())
        self._notify(name, location)
        return location

    def get(self, name: str) -> Optional[Location]:
        raw = self._store.get(name)
        if raw is None:
            return None
        return Location.model_validate_json(raw)

    def delete(self, name: str) -> bool:
        removed = self._store.delete(name)
        if removed:
            self._notify(name, None)
        return removed

    def list(self) -> List[Tuple[str, Location]]:
        items = []
        for name in self._store.keys():
            location = self.get(name)
            if location is not None:
                items.append((name, location))
        return items

    def current(self) -> Optional[Location]:
        if self._provider is None:
            return None
        return self._provider.current_location()
