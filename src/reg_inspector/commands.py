"""
reg-inspector Commands

One function per CLI command. Each validates its arguments, calls into the
store or the search/flags engine, and returns a result for the CLI to
render. Errors propagate as RegInspectorError subclasses.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from reg_inspector.config import Settings
from reg_inspector.exceptions import InvalidArgumentError
from reg_inspector.flags import FlagRecord, view_flags as query_flags
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import Hive, NodeRoot, RegPath
from reg_inspector.search import find_nodes
from reg_inspector.store.base import AccessMode, NodeStore, RegValue, ValueType
from reg_inspector.validators import validate_argument, validate_dword

logger = get_logger("commands")

DWORD_MASK = 0xFFFFFFFF


@dataclass
class CommandResult:
    """Outcome of a command."""
    success: bool
    message: str = ""
    title: str = ""
    lines: List[str] = field(default_factory=list)


def require(argument: str, value: Optional[str]) -> str:
    """Validate an argument, raising InvalidArgumentError if it is bad."""
    valid, message = validate_argument(argument, value)
    if not valid:
        raise InvalidArgumentError(message, argument=argument)
    return value


def parse_dword(text: str) -> int:
    """Parse DWORD data the way C's atoi does.

    Leading whitespace and one sign are allowed, parsing stops at the first
    non-digit, and text with no digits yields 0. The result wraps to 32 bits.
    """
    match = re.match(r"\s*([+-]?\d+)", text or "")
    number = int(match.group(1)) if match else 0
    return number & DWORD_MASK


def convert_value(name: str, type_name: str, text: str) -> RegValue:
    """Build a typed value from command line text.

    Args:
        name: Value name
        type_name: REG_SZ, REG_BINARY, REG_DWORD or REG_LINK
        text: Value data as typed

    Returns:
        RegValue with data converted for its type
    """
    require("value_type", type_name)
    value_type = ValueType[type_name.strip().upper()]

    if value_type == ValueType.REG_DWORD:
        valid, message = validate_dword(text)
        if not valid:
            logger.warning(message)
        return RegValue(name=name, type=value_type, data=parse_dword(text))
    if value_type == ValueType.REG_BINARY:
        return RegValue(name=name, type=value_type, data=(text or "").encode("utf-8"))
    return RegValue(name=name, type=value_type, data=text or "")


def _root(hive_name: str, path: str = "") -> NodeRoot:
    require("hive", hive_name)
    require("path", path)
    return NodeRoot(Hive.from_name(hive_name), RegPath.parse(path))


def add_key(store: NodeStore, hive_name: str, path: str) -> CommandResult:
    """Create a key. Fails if the key already exists."""
    root = _root(hive_name)
    key = RegPath.parse(require("path", path))
    if key.is_root:
        raise InvalidArgumentError("Key path is required", argument="path")
    if store.create_node(root, key):
        logger.debug("Created %s", root.describe(key))
        return CommandResult(True, f"Created {root.describe(key)}")
    return CommandResult(False, f"{root.describe(key)} already exists")


def add_value(
    store: NodeStore,
    hive_name: str,
    path: str,
    value_name: str,
    type_name: str,
    data: str,
) -> CommandResult:
    """Set a typed value under an existing key."""
    root = _root(hive_name)
    require("value_name", value_name)
    value = convert_value(value_name, type_name, data)
    key = RegPath.parse(require("path", path))
    store.set_value(root, key, value)
    return CommandResult(True, f"Set {value.type.value} {value_name} on {root.describe(key)}")


def search_key(
    store: NodeStore,
    hive_name: str,
    path: str,
    term: str,
    settings: Optional[Settings] = None,
) -> CommandResult:
    """Find keys below ``hive\\path`` whose path matches ``term``."""
    settings = settings or Settings()
    root = _root(hive_name, path)
    require("term", term)

    # Fail early with a clear error when the starting key is missing
    with store.opened(root, RegPath(), AccessMode.READ):
        pass

    found = find_nodes(store, root, term, max_depth=settings.max_depth)
    title = f"Search result in {root.hive.name}\\{path}\\:"
    lines = [f"{index}. {found_path}" for index, found_path in enumerate(found)]
    return CommandResult(True, f"{len(found)} keys found", title=title, lines=lines)


def format_flags(flags: List[FlagRecord]) -> List[str]:
    return [
        f"{index}. Flag name: {record.name.value}  Flag value: {record.value}"
        for index, record in enumerate(flags)
    ]


def view_flags(hive_name: str, path: str, settings: Optional[Settings] = None) -> CommandResult:
    """Show the virtualization flags of a key."""
    root = _root(hive_name, path)
    flags = query_flags(root.hive, root.base, settings)
    return CommandResult(True, title="Key flags:", lines=format_flags(flags))


def notify(
    store: NodeStore,
    hive_name: str,
    path: str,
    watch_subtree: bool = True,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Wait for a change under a key."""
    root = _root(hive_name, path)
    if timeout is not None and timeout <= 0:
        raise InvalidArgumentError("Timeout must be positive", argument="timeout")
    changed = store.watch_for_changes(root, RegPath(), watch_subtree=watch_subtree, timeout=timeout)
    if changed:
        return CommandResult(True, f"Change notification registered for {root.describe()}")
    return CommandResult(False, f"No change under {root.describe()} within {timeout} seconds")
