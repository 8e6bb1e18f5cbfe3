import itertools
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import List, Optional, Union

from .errors import AlreadyEmpty, NoSlotAvailable, SlotNotFound

logger = logging.getLogger(__name__)


@dataclass
class Slot:
    id: int
    slot_no: Union[int, float]
    is_covered: bool
    is_ev_charging: bool
    is_occupied: bool = False
    vehicle_id: Optional[str] = None

    def matches(self, needs_ev: bool, needs_cover: bool) -> bool:
        return (not needs_ev or self.is_ev_charging) and (not needs_cover or self.is_covered)


@dataclass(frozen=True)
class OccupancyStats:
    total: int
    occupied: int
    available: int


def _by_slot_no(slots: List[Slot]) -> List[Slot]:
    return sorted(slots, key=lambda s: s.slot_no)


class SlotRegistry:
    """In-memory collection of parking slots.

    Slots keep insertion order internally; every listing is returned sorted
    by ``slot_no``. Allocation picks the lowest-numbered free slot that
    satisfies the requested amenities. A single lock serializes access so
    the read-then-write in ``allocate`` stays atomic when handlers run on
    worker threads.
    """

    def __init__(self) -> None:
        self._slots: List[Slot] = []
        self._ids = itertools.count(1)
        self._vehicles = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._slots)

    def _next_vehicle_id(self) -> str:
        return f"VEHICLE_{next(self._vehicles)}_{secrets.token_hex(4)}"

    def _available(self, needs_ev: bool, needs_cover: bool) -> List[Slot]:
        return _by_slot_no([s for s in self._slots if not s.is_occupied and s.matches(needs_ev, needs_cover)])

    def create(self, slot_no: Union[int, float], is_covered: bool, is_ev_charging: bool) -> Slot:
        with self._lock:
            slot = Slot(
                id=next(self._ids),
                slot_no=slot_no,
                is_covered=bool(is_covered),
                is_ev_charging=bool(is_ev_charging),
            )
            self._slots.append(slot)
        logger.info("Added slot %s (id=%d, covered=%s, ev=%s)", slot.slot_no, slot.id, slot.is_covered, slot.is_ev_charging)
        return slot

    def list_all(self) -> List[Slot]:
        with self._lock:
            return _by_slot_no(self._slots)

    def list_available(self, needs_ev: bool = False, needs_cover: bool = False) -> List[Slot]:
        with self._lock:
            return self._available(needs_ev, needs_cover)

    def list_occupied(self) -> List[Slot]:
        with self._lock:
            return _by_slot_no([s for s in self._slots if s.is_occupied])

    def allocate(self, needs_ev: bool = False, needs_cover: bool = False) -> Slot:
        with self._lock:
            candidates = self._available(needs_ev, needs_cover)
            if not candidates:
                logger.warning("No slot available (needs_ev=%s, needs_cover=%s)", needs_ev, needs_cover)
                raise NoSlotAvailable()
            slot = candidates[0]
            slot.is_occupied = True
            slot.vehicle_id = self._next_vehicle_id()
        logger.info("Parked %s in slot %s", slot.vehicle_id, slot.slot_no)
        return slot

    def release(self, slot_id: int) -> Slot:
        with self._lock:
            slot = self._find(slot_id)
            if slot is None:
                logger.warning("Release of unknown slot id %s", slot_id)
                raise SlotNotFound()
            if not slot.is_occupied:
                logger.warning("Release of empty slot %s", slot.slot_no)
                raise AlreadyEmpty()
            vehicle_id = slot.vehicle_id
            slot.is_occupied = False
            slot.vehicle_id = None
        logger.info("Removed %s from slot %s", vehicle_id, slot.slot_no)
        return slot

    def _find(self, slot_id: int) -> Optional[Slot]:
        return next((s for s in self._slots if s.id == slot_id), None)

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        with self._lock:
            return self._find(slot_id)

    def find_by_slot_no(self, slot_no: Union[int, float]) -> Optional[Slot]:
        with self._lock:
            return next((s for s in self._slots if s.slot_no == slot_no), None)

    def stats(self) -> OccupancyStats:
        with self._lock:
            occupied = sum(1 for s in self._slots if s.is_occupied)
            return OccupancyStats(total=len(self._slots), occupied=occupied, available=len(self._slots) - occupied)
