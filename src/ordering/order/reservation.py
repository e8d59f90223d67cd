"""Stock reservation and release for order lines.

``reserve_lines`` takes stock for every line or for none: each line is one
atomic ``adjust_stock`` decrement, and if any line fails the lines already
taken are given back before the error propagates. ``restore_lines`` is the
compensating action used by cancellation and refund, and is all-or-nothing
in the same way.
"""

import threading
from contextlib import contextmanager

import structlog

from ordering.inventory.port import InventoryLedger

logger = structlog.get_logger(__name__)


def reserve_lines(ledger: InventoryLedger, lines) -> None:
    """Decrement stock for ``lines`` (objects or dicts with product_id and quantity)."""
    _adjust_all(ledger, [(product_id, -quantity) for product_id, quantity in _quantities(lines)])


def restore_lines(ledger: InventoryLedger, lines) -> None:
    _adjust_all(ledger, [(product_id, quantity) for product_id, quantity in _quantities(lines)])


def _adjust_all(ledger: InventoryLedger, changes) -> None:
    applied = []
    try:
        for product_id, delta in changes:
            ledger.adjust_stock(product_id, delta)
            applied.append((product_id, delta))
    except Exception:
        for product_id, delta in reversed(applied):
            ledger.adjust_stock(product_id, -delta)
        if applied:
            logger.info("stock_adjustment_rolled_back", lines=len(applied))
        raise


def _quantities(lines):
    for line in lines:
        if isinstance(line, dict):
            yield str(line["product_id"]), int(line["quantity"])
        else:
            yield str(line.product_id), int(line.quantity)


class KeyedLocks:
    """One re-entrant lock per key, alive only while someone holds or waits for it.

    Serialises every mutation of a single order inside this process while
    letting different orders proceed in parallel.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: dict[str, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key):
        key = str(key)
        with self._guard:
            entry = self._locks.setdefault(key, [threading.RLock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if not entry[1]:
                    del self._locks[key]
