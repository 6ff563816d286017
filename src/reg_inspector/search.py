"""
Key search: enumerate a subtree, then filter it by name.
"""

from typing import List

from reg_inspector.config import DEFAULT_MAX_DEPTH
from reg_inspector.enumerator import list_all_descendants
from reg_inspector.exceptions import InvalidArgumentError, NoNodesEnumeratedError
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import NodeRoot, RegPath, filter_paths
from reg_inspector.store.base import NodeStore

logger = get_logger("search")


def find_nodes(
    store: NodeStore,
    root: NodeRoot,
    term: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[RegPath]:
    """Find keys under ``root`` whose path matches ``term``.

    Args:
        store: Backend to search
        root: Where the search starts; results are relative to it
        term: Non-empty search term (see ``paths.matches``)
        max_depth: Levels below ``root`` to search

    Returns:
        Matching paths in enumeration order, possibly empty

    Raises:
        InvalidArgumentError: ``term`` is empty
        NodeUnreachableError: ``root`` cannot be enumerated
        NoNodesEnumeratedError: ``root`` has no subkeys at all
    """
    if not term:
        raise InvalidArgumentError("Search term cannot be empty", argument="term")

    every = list_all_descendants(store, root, RegPath(), max_depth=max_depth)
    if not every:
        raise NoNodesEnumeratedError(
            f"No subkeys under {root.describe()}",
            remediation="Search from a key that has subkeys",
        )

    found = filter_paths(every, term)
    logger.debug("%d of %d keys under %s match '%s'", len(found), len(every), root.describe(), term)
    return found
