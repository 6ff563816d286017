"""
reg-inspector Node Stores

Backends the enumerator and commands run against.
"""

from pathlib import Path
from typing import Optional

from reg_inspector.store.base import AccessMode, NodeStore, RegValue, ValueType
from reg_inspector.store.memory import MemoryStore


def open_store(snapshot: Optional[Path] = None) -> NodeStore:
    """Open a YAML snapshot store, or the live registry when none is given."""
    if snapshot:
        return MemoryStore.from_yaml(Path(snapshot))

    from reg_inspector.store.winreg_store import WinRegStore
    return WinRegStore()


__all__ = [
    "AccessMode",
    "MemoryStore",
    "NodeStore",
    "RegValue",
    "ValueType",
    "open_store",
]
