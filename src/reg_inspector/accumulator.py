"""
Result accumulation for path lists.
"""

from typing import List, Optional, Sequence

from reg_inspector.exceptions import AllocationFailureError
from reg_inspector.paths import RegPath


def append_paths(
    paths: Optional[List[RegPath]],
    items: Sequence[RegPath],
) -> Optional[List[RegPath]]:
    """Append ``items`` to ``paths`` and return the grown list.

    The list passed in is consumed: callers must continue with the return
    value. It is never modified, so if growing fails it still holds exactly
    what it held before the call.

    Args:
        paths: Accumulated paths, or None when an earlier step failed
        items: Paths to add, in order

    Returns:
        ``paths`` itself when ``items`` is empty, None when ``paths`` is None,
        otherwise a new list of ``paths`` followed by ``items``

    Raises:
        AllocationFailureError: The grown list could not be allocated
    """
    if not items:
        return paths
    if paths is None:
        return None
    try:
        return paths + list(items)
    except MemoryError:
        raise AllocationFailureError(
            f"Could not grow a list of {len(paths)} paths by {len(items)}",
            details="No path from this batch was added",
        )
