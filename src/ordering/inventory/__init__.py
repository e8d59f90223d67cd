"""Inventory ledger factory.

Provides get_ledger() / set_ledger() to swap implementations:
- InMemoryInventoryLedger for development and testing (default)
- SqlInventoryLedger when ``INVENTORY_LEDGER=sql`` and
  ``INVENTORY_DATABASE_URI`` point at a database
"""

import os

from ordering.inventory.memory_adapter import InMemoryInventoryLedger
from ordering.inventory.port import InventoryLedger, ProductSnapshot
from ordering.inventory.sql_adapter import SqlInventoryLedger

__all__ = [
    "InMemoryInventoryLedger",
    "InventoryLedger",
    "ProductSnapshot",
    "SqlInventoryLedger",
    "get_ledger",
    "reset_ledger",
    "set_ledger",
]

_current_ledger: InventoryLedger | None = None


def _ledger_from_environment() -> InventoryLedger:
    kind = os.environ.get("INVENTORY_LEDGER", "memory").lower()
    if kind == "sql":
        ledger = SqlInventoryLedger(os.environ["INVENTORY_DATABASE_URI"])
        ledger.create_schema()
        return ledger
    if kind == "memory":
        return InMemoryInventoryLedger()
    raise ValueError(f"Unknown INVENTORY_LEDGER '{kind}'")


def get_ledger() -> InventoryLedger:
    """Return the current inventory ledger, building it from the environment on first use."""
    global _current_ledger
    if _current_ledger is None:
        _current_ledger = _ledger_from_environment()
    return _current_ledger


def set_ledger(ledger: InventoryLedger) -> None:
    """Override the active ledger (useful for tests)."""
    global _current_ledger
    _current_ledger = ledger


def reset_ledger() -> None:
    global _current_ledger
    _current_ledger = None
