"""
In-memory parking availability store.

The store is the single owner of the parking records. Every mutation and
every multi-record read runs inside one exclusive critical section, and
callers only ever receive copies, so a reader can never observe a record
whose available_spaces and last_updated disagree.
"""

import random
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .catalog import load_catalog
from .config import get_perturbation_max_step, get_report_full_ratio
from .errors import StoreError
from .geo import distance_m
from .schema import ChangeEvent, ParkingRecord, Position

from ..util.logging import logger

Subscriber = Callable[[ChangeEvent], None]


@dataclass
class WriteResult:
    """Outcome of a single write, captured inside the store's critical section."""
    applied: bool
    reason: str  # applied, unknown place_id, store closed, capacity unknown
    record: Optional[ParkingRecord] = None
    version: int = 0


def clamp_available(value: int, total: Optional[int]) -> int:
    """Clamp an availability count to [0, total], or to >= 0 when total is unknown."""
    value = max(0, int(value))
    if total is not None:
        value = min(total, value)
    return value


def full_report_count(total: int, ratio: float) -> int:
    """Spaces left by a 'full' report: ratio * total rounded half-up."""
    return int(total * ratio + 0.5)


class ParkingStore:
    """
    Authoritative set of parking records with ranking, report and
    perturbation operations.

    Args:
        rng: random source for perturbations (inject a seeded Random in tests)
        clock: callable returning the current datetime
        max_step: largest absolute perturbation, defaults to PERTURBATION_MAX_STEP
        full_ratio: fraction of capacity left by report_full, defaults to REPORT_FULL_RATIO
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 max_step: Optional[int] = None,
                 full_ratio: Optional[float] = None):
        self._lock = threading.RLock()
        self._records: Dict[str, ParkingRecord] = {}  # insertion order is catalog order
        self._subscribers: List[Subscriber] = []
        self._rng = rng or random.Random()
        self._clock = clock or datetime.now
        self._max_step = get_perturbation_max_step() if max_step is None else max_step
        self._full_ratio = get_report_full_ratio() if full_ratio is None else full_ratio
        self._initialized = False
        self._closed = False
        self._version = 0

    # Lifecycle

    def initialize(self, records: Optional[Iterable[ParkingRecord]] = None) -> int:
        """
        Populate the store from the seed catalog, or from `records` if given.

        Only valid once per store; a second call raises StoreError.
        Returns the number of records loaded.
        """
        if records is None:
            records = load_catalog(now=self._clock())

        loaded: Dict[str, ParkingRecord] = {}
        for record in records:
            if record.place_id in loaded:
                raise StoreError(f"duplicate place_id: {record.place_id}")
            if record.total_spaces is not None and record.total_spaces < 0:
                raise StoreError(f"negative total_spaces for {record.place_id}: {record.total_spaces}")
            copy = record.copy()
            if copy.available_spaces is not None:
                copy.available_spaces = clamp_available(copy.available_spaces, copy.total_spaces)
            loaded[record.place_id] = copy

        with self._lock:
            if self._initialized:
                raise StoreError("ParkingStore already initialized")
            if self._closed:
                raise StoreError("ParkingStore is closed")
            self._records = loaded
            self._initialized = True
            event = self._bump("initialize", list(loaded))

        logger.log_store_mutation("initialize", event.place_ids, event.version)
        self._notify(event)
        return len(loaded)

    def close(self) -> None:
        """Tear the store down. Every later mutation is a no-op."""
        with self._lock:
            self._closed = True
        logger.info("ParkingStore closed")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def version(self) -> int:
        """Change counter, incremented once per applied mutation."""
        with self._lock:
            return self._version

    # Change notification

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes it."""
        if not callable(callback):
            raise ValueError(f"Subscriber must be callable: {callback}")

        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _bump(self, kind: str, place_ids: List[str]) -> ChangeEvent:
        # Caller holds the lock
        self._version += 1
        return ChangeEvent(kind=kind, place_ids=tuple(place_ids), version=self._version)

    def _notify(self, event: ChangeEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.log_subscriber_error(event.kind, e)

    def _touch(self, record: ParkingRecord, available: int, now: datetime) -> None:
        record.available_spaces = available
        # last_updated never moves backwards, even if the clock does
        record.last_updated = max(now, record.last_updated)

    # Reads

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def is_empty(self) -> bool:
        return len(self) == 0

    def list_all(self) -> List[ParkingRecord]:
        """Snapshot of every record in catalog order."""
        with self._lock:
            return [record.copy() for record in self._records.values()]

    def get(self, place_id: str) -> Optional[ParkingRecord]:
        with self._lock:
            record = self._records.get(place_id)
            return record.copy() if record is not None else None

    def list_sorted_with_distance(self, position: Position) -> List[Tuple[ParkingRecord, float]]:
        """All records paired with their distance in meters, nearest first."""
        snapshot = self.list_all()
        ranked = [(record, distance_m(record, position)) for record in snapshot]
        # sorted() is stable, so equal distances keep catalog order
        return sorted(ranked, key=lambda pair: pair[1])

    def list_sorted_by_distance(self, position: Position) -> List[ParkingRecord]:
        """All records ordered by ascending distance to `position`."""
        return [record for record, _ in self.list_sorted_with_distance(position)]

    def nearest(self, position: Position) -> Optional[ParkingRecord]:
        """The closest record to `position`, or None when the store is empty."""
        ranked = self.list_sorted_with_distance(position)
        if not ranked:
            return None
        return ranked[0][0]

    # Writes

    def write_availability(self, place_id: str, available: int) -> WriteResult:
        """
        Set a record's available spaces (clamped to [0, total]) and refresh
        last_updated. The returned record copy and version are the ones this
        write produced, even if another write lands right after it.
        """
        with self._lock:
            if self._closed:
                return WriteResult(applied=False, reason="store closed", version=self._version)
            record = self._records.get(place_id)
            if record is None:
                return WriteResult(applied=False, reason="unknown place_id", version=self._version)
            self._touch(record, clamp_available(available, record.total_spaces), self._clock())
            event = self._bump("availability_update", [place_id])
            result = WriteResult(applied=True, reason="applied", record=record.copy(), version=event.version)

        logger.log_store_mutation("availability_update", event.place_ids, event.version)
        self._notify(event)
        return result

    def update_availability(self, place_id: str, available: int) -> bool:
        """Like write_availability; returns False, changing nothing, for unknown ids."""
        return self.write_availability(place_id, available).applied

    def write_full(self, place_id: str) -> WriteResult:
        """
        Mark a record as nearly full: available becomes a small nonzero share
        of capacity. Not applied for unknown ids or unknown capacity.
        """
        with self._lock:
            if self._closed:
                return WriteResult(applied=False, reason="store closed", version=self._version)
            record = self._records.get(place_id)
            if record is None:
                return WriteResult(applied=False, reason="unknown place_id", version=self._version)
            if record.total_spaces is None:
                return WriteResult(applied=False, reason="capacity unknown", record=record.copy(),
                                   version=self._version)
            available = full_report_count(record.total_spaces, self._full_ratio)
            self._touch(record, clamp_available(available, record.total_spaces), self._clock())
            event = self._bump("report_full", [place_id])
            result = WriteResult(applied=True, reason="applied", record=record.copy(), version=event.version)

        logger.log_store_mutation("report_full", event.place_ids, event.version)
        self._notify(event)
        return result

    def report_full(self, place_id: str) -> bool:
        """Like write_full; returns False for unknown ids or unknown capacity."""
        return self.write_full(place_id).applied

    def run_periodic_update(self) -> int:
        """
        Apply one random walk step to every record with known capacity.

        Each step is drawn uniformly from [-max_step, max_step] and the result
        is clamped to [0, total]. Returns the number of records touched.
        """
        with self._lock:
            if self._closed:
                return 0
            now = self._clock()
            touched = []
            for record in self._records.values():
                if record.total_spaces is None:
                    continue
                change = self._rng.randint(-self._max_step, self._max_step)
                current = record.available_spaces or 0
                self._touch(record, clamp_available(current + change, record.total_spaces), now)
                touched.append(record.place_id)
            if not touched:
                return 0
            event = self._bump("periodic_update", touched)

        logger.log_store_mutation("periodic_update", event.place_ids, event.version)
        self._notify(event)
        return len(touched)
