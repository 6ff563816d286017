"""
In-memory node store, loadable from a YAML snapshot.

Snapshot layout::

    HKEY_LOCAL_MACHINE:
      SOFTWARE:
        Vendor:
          _values:
            Version: {type: REG_SZ, data: "1.0"}
            Enabled: {type: REG_DWORD, data: 1}
          Plugins: {}
        Locked:
          _denied: true

Child order in the file is the enumeration order. A node marked
``_denied`` exists but cannot be opened.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from reg_inspector.exceptions import ConfigError, InvalidArgumentError, NodeUnreachableError
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import Hive, NodeRoot, RegPath
from reg_inspector.store.base import AccessMode, NodeStore, RegValue, ValueType

logger = get_logger("store.memory")

VALUES_KEY = "_values"
DENIED_KEY = "_denied"


@dataclass
class MemoryNode:
    """One key in the in-memory tree."""
    children: Dict[str, "MemoryNode"] = field(default_factory=dict)
    values: Dict[str, RegValue] = field(default_factory=dict)
    denied: bool = False

    def find_child(self, name: str) -> Optional["MemoryNode"]:
        """Look up a child, ignoring case like the registry does."""
        if name in self.children:
            return self.children[name]
        folded = name.casefold()
        for child_name, child in self.children.items():
            if child_name.casefold() == folded:
                return child
        return None


@dataclass
class MemoryHandle:
    """Handle to an opened MemoryNode."""
    node: MemoryNode
    label: str
    access: AccessMode
    closed: bool = False


def _value_from_mapping(name: str, raw: Any) -> RegValue:
    if isinstance(raw, dict):
        try:
            value_type = ValueType(str(raw.get("type", "REG_SZ")).upper())
        except ValueError:
            raise ConfigError(f"Unknown value type for '{name}': {raw.get('type')!r}")
        data = raw.get("data", "")
    else:
        value_type = ValueType.REG_DWORD if isinstance(raw, int) and not isinstance(raw, bool) else ValueType.REG_SZ
        data = raw

    if value_type == ValueType.REG_DWORD:
        data = int(data)
    elif value_type == ValueType.REG_BINARY:
        data = data if isinstance(data, bytes) else bytes.fromhex(str(data))
    else:
        data = "" if data is None else str(data)
    return RegValue(name=name, type=value_type, data=data)


def _value_to_mapping(value: RegValue) -> Dict[str, Any]:
    data = value.data.hex() if isinstance(value.data, bytes) else value.data
    return {"type": value.type.value, "data": data}


def _node_from_mapping(raw: Any, label: str) -> MemoryNode:
    node = MemoryNode()
    if raw is None:
        return node
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Snapshot node '{label}' must be a mapping",
            details=f"Got {type(raw).__name__}",
        )
    for key, child in raw.items():
        key = str(key)
        if key == VALUES_KEY:
            for value_name, value_raw in (child or {}).items():
                node.values[str(value_name)] = _value_from_mapping(str(value_name), value_raw)
        elif key == DENIED_KEY:
            node.denied = bool(child)
        else:
            node.children[key] = _node_from_mapping(child, f"{label}\\{key}")
    return node


def _node_to_mapping(node: MemoryNode) -> Dict[str, Any]:
    mapping: Dict[str, Any] = {}
    if node.denied:
        mapping[DENIED_KEY] = True
    if node.values:
        mapping[VALUES_KEY] = {name: _value_to_mapping(v) for name, v in node.values.items()}
    for name, child in node.children.items():
        mapping[name] = _node_to_mapping(child)
    return mapping


class MemoryStore(NodeStore):
    """A NodeStore kept entirely in memory."""

    def __init__(self, hives: Optional[Dict[Hive, MemoryNode]] = None):
        self.hives: Dict[Hive, MemoryNode] = {hive: MemoryNode() for hive in Hive}
        if hives:
            self.hives.update(hives)
        self.watches = []

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "MemoryStore":
        """Build a store from a ``{hive name: {key: {...}}}`` mapping."""
        hives = {}
        for hive_name, raw in (data or {}).items():
            try:
                hive = Hive.from_name(str(hive_name))
            except InvalidArgumentError as e:
                raise ConfigError(f"Unknown hive in snapshot: {hive_name}", details=e.message)
            hives[hive] = _node_from_mapping(raw, hive.name)
        return cls(hives)

    @classmethod
    def from_yaml(cls, snapshot: Path) -> "MemoryStore":
        """Load a store from a YAML snapshot file."""
        snapshot = Path(snapshot)
        try:
            data = yaml.safe_load(snapshot.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {snapshot}", details=str(e))
        except OSError as e:
            raise ConfigError(
                f"Cannot read snapshot {snapshot}",
                remediation="Check the --store-file path",
                details=str(e),
            )
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Snapshot {snapshot} must map hive names to keys")
        logger.debug("Loaded snapshot from %s", snapshot)
        return cls.from_mapping(data)

    def to_mapping(self) -> Dict[str, Any]:
        """Serialize non-empty hives back to the snapshot layout."""
        return {
            hive.name: _node_to_mapping(node)
            for hive, node in self.hives.items()
            if node.children or node.values
        }

    def save(self, snapshot: Path) -> None:
        """Write the store back to a YAML snapshot."""
        snapshot = Path(snapshot)
        try:
            snapshot.write_text(
                yaml.safe_dump(self.to_mapping(), default_flow_style=False, sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise ConfigError(f"Cannot write snapshot {snapshot}", details=str(e))

    def _lookup(self, root: NodeRoot, path: RegPath) -> MemoryNode:
        full = root.resolve(path)
        node = self.hives[root.hive]
        walked = RegPath()
        for segment in full.segments:
            walked = walked.child(segment)
            child = node.find_child(segment)
            if child is None:
                raise NodeUnreachableError(
                    "Key not found",
                    path=NodeRoot(root.hive, walked).describe(),
                )
            node = child
        return node

    def open_node(self, root: NodeRoot, path: RegPath, access: AccessMode) -> MemoryHandle:
        node = self._lookup(root, path)
        label = root.describe(path)
        if node.denied:
            raise NodeUnreachableError("Access is denied", path=label)
        return MemoryHandle(node=node, label=label, access=access)

    def close_node(self, handle: MemoryHandle) -> None:
        handle.closed = True

    def enumerate_child(self, handle: MemoryHandle, index: int) -> Optional[str]:
        if handle.closed:
            raise NodeUnreachableError("Handle is closed", path=handle.label)
        names = list(handle.node.children)
        if index >= len(names):
            return None
        return names[index]

    def create_node(self, root: NodeRoot, path: RegPath) -> bool:
        if root.resolve(path).is_root:
            raise InvalidArgumentError("Cannot create a hive", argument="path")
        node = self.hives[root.hive]
        created = False
        for segment in root.resolve(path).segments:
            if node.denied:
                raise NodeUnreachableError("Access is denied", path=root.describe(path))
            child = node.find_child(segment)
            if child is None:
                child = MemoryNode()
                node.children[segment] = child
                created = True
            else:
                created = False
            node = child
        return created

    def set_value(self, root: NodeRoot, path: RegPath, value: RegValue) -> None:
        with self.opened(root, path, AccessMode.WRITE) as handle:
            handle.node.values[value.name] = value

    def watch_for_changes(
        self,
        root: NodeRoot,
        path: RegPath,
        watch_subtree: bool = True,
        timeout: Optional[float] = None,
    ) -> bool:
        # A snapshot has no other writer; record the registration and return.
        with self.opened(root, path, AccessMode.NOTIFY):
            self.watches.append((root.describe(path), watch_subtree))
        return True
