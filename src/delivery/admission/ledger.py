"""Slot ledger — the in-process booking counter behind admission.

Each (supplier, day, label) key owns a tally of claim ids guarded by its own
lock. A claim is one unit of slot capacity; its id is the id of the order that
will (or already does) consume it. Keeping ids instead of a bare integer makes
``release`` idempotent and lets the count never drop below zero.

Tallies are created lazily. The first touch of a key seeds it from the orders
already persisted for that key, so a fresh process agrees with the database.
After that the tally is maintained incrementally by reserve/release.

Different keys never share a lock: the tally table is filled with
``dict.setdefault``, which is atomic for plain dicts.

Tallies for days more than ``RETAIN_DAYS`` in the past are dropped once a day,
the first time a new key is touched. A dropped key that is touched again is
simply seeded from the database afresh.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)

RETAIN_DAYS = 2


class ClaimState(Enum):
    HELD = "Held"  # reserved, order not yet persisted
    COMMITTED = "Committed"  # backed by a persisted order


@dataclass(frozen=True)
class SlotKey:
    supplier_id: str
    day: date
    label: str

    @classmethod
    def of(cls, supplier_id, day, label) -> "SlotKey":
        return cls(supplier_id=str(supplier_id), day=as_day(day), label=label.strip())


def as_day(value) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


class _SlotTally:
    __slots__ = ("lock", "claims", "seeded")

    def __init__(self):
        self.lock = threading.Lock()
        self.claims: dict[str, ClaimState] = {}
        self.seeded = False


def persisted_claims(key: SlotKey) -> Iterable[str]:
    """Ids of persisted orders still holding capacity in ``key``."""
    from protean.utils.globals import current_domain

    from delivery.order.order import Order

    orders = current_domain.repository_for(Order).claiming_slot(key.supplier_id, key.day, key.label)
    return [str(order.id) for order in orders]


class SlotLedger:
    def __init__(
        self,
        seed: Callable[[SlotKey], Iterable[str]] | None = None,
        today: Callable[[], date] | None = None,
    ):
        self._seed = seed or persisted_claims
        self._today = today or (lambda: datetime.now(UTC).date())
        self._tallies: dict[SlotKey, _SlotTally] = {}
        self._pruned_on: date | None = None
        self._prune_lock = threading.Lock()

    def _tally(self, key: SlotKey) -> _SlotTally:
        tally = self._tallies.get(key)
        if tally is None:
            self._prune_if_due()
            tally = self._tallies.setdefault(key, _SlotTally())
        return tally

    def _prune_if_due(self) -> None:
        today = self._today()
        if self._pruned_on == today:
            return
        with self._prune_lock:
            if self._pruned_on != today:
                self.prune(before=today - timedelta(days=RETAIN_DAYS))
                self._pruned_on = today

    def prune(self, before: date) -> int:
        """Forget tallies for days earlier than ``before``. Returns how many were dropped."""
        stale = [key for key in list(self._tallies) if key.day < before]
        for key in stale:
            self._tallies.pop(key, None)
        if stale:
            logger.debug("Slot tallies pruned", count=len(stale), before=before.isoformat())
        return len(stale)

    def _ensure_seeded(self, key: SlotKey, tally: _SlotTally) -> None:
        # Caller holds tally.lock
        if tally.seeded:
            return
        for claim_id in self._seed(key):
            tally.claims.setdefault(str(claim_id), ClaimState.COMMITTED)
        tally.seeded = True
        logger.debug("Slot tally seeded", supplier_id=key.supplier_id, day=key.day.isoformat(), label=key.label)

    def claim(self, key: SlotKey, claim_id: str, capacity: int) -> bool:
        """Take one unit of capacity for ``claim_id``. False when the slot is full.

        Re-claiming an id that already holds capacity succeeds without taking
        another unit.
        """
        claim_id = str(claim_id)
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            if claim_id in tally.claims:
                return True
            if len(tally.claims) >= capacity:
                return False
            tally.claims[claim_id] = ClaimState.HELD
            return True

    def commit(self, key: SlotKey, claim_id: str) -> bool:
        """Mark a held claim as backed by a persisted order."""
        claim_id = str(claim_id)
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            if claim_id not in tally.claims:
                return False
            tally.claims[claim_id] = ClaimState.COMMITTED
            return True

    def release(self, key: SlotKey, claim_id: str) -> bool:
        """Hand the unit back. Returns False if the claim was already gone."""
        claim_id = str(claim_id)
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            return tally.claims.pop(claim_id, None) is not None

    def holds(self, key: SlotKey, claim_id: str) -> bool:
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            return str(claim_id) in tally.claims

    def state_of(self, key: SlotKey, claim_id: str) -> ClaimState | None:
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            return tally.claims.get(str(claim_id))

    def booked(self, key: SlotKey) -> int:
        tally = self._tally(key)
        with tally.lock:
            self._ensure_seeded(key, tally)
            return len(tally.claims)


_ledger_instance = None
_ledger_guard = threading.Lock()


def get_ledger() -> SlotLedger:
    """Return the process-wide slot ledger (singleton)."""
    global _ledger_instance
    if _ledger_instance is None:
        with _ledger_guard:
            if _ledger_instance is None:
                _ledger_instance = SlotLedger()
    return _ledger_instance


def reset_ledger():
    """Reset the ledger singleton (useful for testing)."""
    global _ledger_instance
    _ledger_instance = None
