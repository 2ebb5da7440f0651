"""
Storage module for regoscope.

Holds the raw source of every registered policy for the lifetime of an
Engine, plus the reader/writer lock that serializes access to the engine
resource. Nothing is persisted to disk.

Design principles:
    - Last write wins: re-registering a name replaces its source wholesale
    - Snapshots out: readers get copies, never the live mapping
    - Derived data is not stored: rule inventories are recomputed on demand
"""

from regoscope.store.lock import ReadWriteLock
from regoscope.store.policies import PolicyStore

__all__ = [
    "PolicyStore",
    "ReadWriteLock",
]
