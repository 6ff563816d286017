"""
reg-inspector Node Store Base Classes

The contract every registry backend implements.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Union

from reg_inspector.paths import NodeRoot, RegPath


class AccessMode(Enum):
    """What an opened node will be used for."""
    ENUMERATE = "enumerate"
    READ = "read"
    WRITE = "write"
    NOTIFY = "notify"


class ValueType(Enum):
    """The value kinds reg-inspector can write."""
    REG_SZ = "REG_SZ"
    REG_BINARY = "REG_BINARY"
    REG_DWORD = "REG_DWORD"
    REG_LINK = "REG_LINK"


@dataclass(frozen=True)
class RegValue:
    """A typed value stored under a node."""
    name: str
    type: ValueType
    data: Union[str, int, bytes]


class NodeStore(ABC):
    """Base class for registry backends.

    Methods raise NodeUnreachableError when the underlying store refuses an
    operation.
    """

    @abstractmethod
    def open_node(self, root: NodeRoot, path: RegPath, access: AccessMode) -> Any:
        """Open ``path`` relative to ``root`` and return a handle."""

    @abstractmethod
    def close_node(self, handle: Any) -> None:
        """Release a handle. Safe to call more than once."""

    @abstractmethod
    def enumerate_child(self, handle: Any, index: int) -> Optional[str]:
        """Return the name of the child at ``index``, or None past the last one."""

    @abstractmethod
    def create_node(self, root: NodeRoot, path: RegPath) -> bool:
        """Create a node. Returns True only if it did not exist before."""

    @abstractmethod
    def set_value(self, root: NodeRoot, path: RegPath, value: RegValue) -> None:
        """Set a value under an existing node."""

    @abstractmethod
    def watch_for_changes(
        self,
        root: NodeRoot,
        path: RegPath,
        watch_subtree: bool = True,
        timeout: Optional[float] = None,
    ) -> bool:
        """Wait for a change below ``path``.

        Returns:
            True when a change was reported, False if ``timeout`` elapsed
        """

    @contextmanager
    def opened(self, root: NodeRoot, path: RegPath, access: AccessMode) -> Iterator[Any]:
        """Open a node for the duration of a ``with`` block."""
        handle = self.open_node(root, path, access)
        try:
            yield handle
        finally:
            self.close_node(handle)
