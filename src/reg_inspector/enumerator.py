"""
Namespace enumeration.

Lists the children of a node, or every descendant of it, in the order
search results are shown to the user.
"""

from typing import List, Optional

from reg_inspector.accumulator import append_paths
from reg_inspector.config import DEFAULT_MAX_DEPTH
from reg_inspector.exceptions import AllocationFailureError, NodeUnreachableError
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import NodeRoot, RegPath
from reg_inspector.store.base import AccessMode, NodeStore

logger = get_logger("enumerator")

# Consecutive unreadable indexes after which a node is treated as exhausted
MAX_SKIPPED_INDEXES = 16


def list_children(store: NodeStore, root: NodeRoot, path: RegPath) -> List[RegPath]:
    """List the immediate children of a node.

    An index the store fails to read is skipped and enumeration moves on
    to the next one, so siblings already read are kept.

    Args:
        store: Backend to read from
        root: Anchor the path is relative to
        path: Node to enumerate

    Returns:
        Child paths in the order the store reports them

    Raises:
        NodeUnreachableError: The node cannot be opened
    """
    children: List[RegPath] = []
    with store.opened(root, path, AccessMode.ENUMERATE) as handle:
        index = 0
        skipped = 0
        while True:
            try:
                name = store.enumerate_child(handle, index)
            except NodeUnreachableError as e:
                logger.debug("Skipping child %d of %s: %s", index, root.describe(path), e.message)
                skipped += 1
                if skipped >= MAX_SKIPPED_INDEXES:
                    logger.warning(
                        "Giving up on %s after %d unreadable children",
                        root.describe(path), skipped,
                    )
                    break
                index += 1
                continue
            skipped = 0
            if name is None:
                break
            try:
                children = append_paths(children, [path.child(name)])
            except AllocationFailureError as e:
                logger.warning("Dropping child %s of %s: %s", name, root.describe(path), e.message)
            index += 1
    return children


def list_all_descendants(
    store: NodeStore,
    root: NodeRoot,
    path: RegPath,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[RegPath]:
    """List every descendant of a node.

    A node's direct children come first, followed by the descendants of
    each child in turn. For a root with children A and B where A holds A1,
    the result is [A, B, A1]. A child that cannot be enumerated contributes
    only itself.

    Args:
        store: Backend to read from
        root: Anchor the path is relative to
        path: Node whose subtree is listed
        max_depth: Levels below ``path`` to expand

    Returns:
        All descendant paths

    Raises:
        NodeUnreachableError: ``path`` itself cannot be enumerated
    """
    level = list_children(store, root, path)
    if max_depth <= 1:
        if level:
            logger.warning(
                "Depth limit reached at %s; %d keys not expanded",
                root.describe(path), len(level),
            )
        return level

    deeper: Optional[List[RegPath]] = []
    for child in level:
        try:
            sub = list_all_descendants(store, root, child, max_depth - 1)
        except (NodeUnreachableError, AllocationFailureError) as e:
            logger.debug("Skipping subtree %s: %s", root.describe(child), e.message)
            continue
        try:
            deeper = append_paths(deeper, sub)
        except AllocationFailureError as e:
            logger.warning("Dropping subtree %s: %s", root.describe(child), e.message)

    return append_paths(level, deeper)
