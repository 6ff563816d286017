"""
Key flag extraction.

`REG FLAGS <key> QUERY` prints the virtualization flags of a key, for
example::

    REG_KEY_DONT_VIRTUALIZE: CLEAR
    REG_KEY_DONT_SILENT_FAIL: CLEAR
    REG_KEY_RECURSE_FLAG: CLEAR

This module builds that command, runs it and pulls the flag values out of
the captured text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from reg_inspector.config import DEFAULT_FLAGS_COMMAND, Settings
from reg_inspector.exceptions import (
    FlagNotFoundError,
    FlagValueMissingError,
    InvalidArgumentError,
)
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import SEPARATOR, Hive, RegPath
from reg_inspector.process_channel import run_command

logger = get_logger("flags")

DELIMITERS = frozenset(": \r\t\n")


class KeyFlag(Enum):
    """Flags reported by the flags tool, in display order."""
    REG_KEY_DONT_VIRTUALIZE = "REG_KEY_DONT_VIRTUALIZE"
    REG_KEY_DONT_SILENT_FAIL = "REG_KEY_DONT_SILENT_FAIL"
    REG_KEY_RECURSE_FLAG = "REG_KEY_RECURSE_FLAG"


@dataclass
class FlagRecord:
    """One flag and its parsed value."""
    name: KeyFlag
    value: Optional[str] = None


def _token_after(text: str, start: int) -> Optional[str]:
    """Skip delimiters from ``start`` and return the next token, if any."""
    position = start
    while position < len(text) and text[position] in DELIMITERS:
        position += 1
    end = position
    while end < len(text) and text[end] not in DELIMITERS:
        end += 1
    if end == position:
        return None
    return text[position:end]


def extract_flags(text: str, names: Iterable[KeyFlag] = KeyFlag) -> List[FlagRecord]:
    """Extract flag values from tool output.

    Every flag is searched from the start of ``text``, so the order flags
    appear in the output does not matter. Either all flags are found or
    an error is raised.

    Args:
        text: Captured tool output
        names: Flags to extract, in output order

    Returns:
        One FlagRecord per flag, values filled in

    Raises:
        FlagNotFoundError: A flag name is absent from ``text``
        FlagValueMissingError: A flag name is not followed by a value
    """
    if text is None:
        raise InvalidArgumentError("No output to parse", argument="text")

    records = [FlagRecord(name=flag) for flag in names]
    values = []
    for record in records:
        flag_name = record.name.value
        position = text.find(flag_name)
        if position < 0:
            raise FlagNotFoundError(
                f"Flag {flag_name} not found in tool output",
                flag=flag_name,
                details=text.strip()[:200] or None,
            )
        value = _token_after(text, position + len(flag_name))
        if value is None:
            raise FlagValueMissingError(f"Flag {flag_name} has no value", flag=flag_name)
        values.append(value)

    for record, value in zip(records, values):
        record.value = value
    return records


def build_flags_query(hive: Hive, path: RegPath, template: str = DEFAULT_FLAGS_COMMAND) -> str:
    """Render the flags command for a key, e.g. ``REG FLAGS HKLM\\SOFTWARE\\Test QUERY``."""
    key = f"{hive.name}{SEPARATOR}{path}"
    return template.format(key=key)


def view_flags(hive: Hive, path: RegPath, settings: Optional[Settings] = None) -> List[FlagRecord]:
    """Query and parse the flags of a key.

    Args:
        hive: Root key
        path: Key below the hive
        settings: Command template, buffer size and timeout

    Returns:
        Parsed flags in KeyFlag order
    """
    settings = settings or Settings()
    command = build_flags_query(hive, path, settings.flags_command)
    captured = run_command(
        command,
        capacity=settings.capture_buffer_size,
        timeout=settings.process_timeout,
    )
    if captured.returncode != 0:
        logger.debug("'%s' exited with %s", command, captured.returncode)
    return extract_flags(captured.text)
