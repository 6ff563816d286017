"""
reg-inspector Input Validators

Checks for command arguments before they reach the store.
"""

import re
from typing import Tuple

from reg_inspector.paths import SEPARATOR, Hive
from reg_inspector.store.base import ValueType

# Registry limits: key names up to 255 characters, value names up to 16383
MAX_KEY_NAME_LENGTH = 255
MAX_VALUE_NAME_LENGTH = 16383


def validate_hive_name(name: str) -> Tuple[bool, str]:
    """Validate a root key name.

    Args:
        name: Full (HKEY_LOCAL_MACHINE) or short (HKLM) hive name

    Returns:
        Tuple of (is_valid, message)
    """
    if not name:
        return False, "Root key is required"

    key = name.strip().upper()
    for hive in Hive:
        if key in (hive.name, hive.short_name):
            return True, f"Valid root key: {hive.name}"

    return False, "Root key should be one of: " + ", ".join(h.name for h in Hive)


def validate_key_path(path: str, allow_empty: bool = True) -> Tuple[bool, str]:
    """Validate a key path below a hive.

    Args:
        path: Backslash separated key path
        allow_empty: If True, an empty path (the hive itself) is accepted

    Returns:
        Tuple of (is_valid, message)
    """
    if not path:
        if allow_empty:
            return True, "Hive root"
        return False, "Key path is required"

    segments = [s for s in path.split(SEPARATOR) if s]
    if not segments:
        return False, "Key path contains only separators"

    for segment in segments:
        if len(segment) > MAX_KEY_NAME_LENGTH:
            return False, f"Key name '{segment[:20]}...' is longer than {MAX_KEY_NAME_LENGTH} characters"

    return True, "Valid key path"


def validate_search_term(term: str) -> Tuple[bool, str]:
    """Validate a key search term."""
    if not term:
        return False, "Search term is required"
    return True, "Valid search term"


def validate_value_name(name: str) -> Tuple[bool, str]:
    """Validate a value name. The empty name addresses the default value."""
    if name is None:
        return False, "Value name is required"
    if len(name) > MAX_VALUE_NAME_LENGTH:
        return False, f"Value name is longer than {MAX_VALUE_NAME_LENGTH} characters"
    return True, "Valid value name"


def validate_value_type(type_name: str) -> Tuple[bool, str]:
    """Validate a value type name.

    Args:
        type_name: One of REG_SZ, REG_BINARY, REG_DWORD, REG_LINK

    Returns:
        Tuple of (is_valid, message)
    """
    if not type_name:
        return False, "Value type is required"

    if type_name.strip().upper() in ValueType.__members__:
        return True, f"Valid value type: {type_name.upper()}"

    return False, "Value type should be one of: " + ", ".join(ValueType.__members__)


def validate_dword(text: str) -> Tuple[bool, str]:
    """Check that DWORD data starts with a decimal number.

    Callers may still store non-numeric input, which becomes 0.
    """
    if re.match(r"^\s*[+-]?\d", text or ""):
        return True, "Valid DWORD data"
    return False, f"'{text}' is not a number; 0 will be stored"


# Map of argument names to validators
ARGUMENT_VALIDATORS = {
    "hive": validate_hive_name,
    "path": validate_key_path,
    "term": validate_search_term,
    "value_name": validate_value_name,
    "value_type": validate_value_type,
}


def validate_argument(argument: str, value: str) -> Tuple[bool, str]:
    """Validate a command argument by name.

    Args:
        argument: Argument name (e.g., 'hive')
        value: The argument value

    Returns:
        Tuple of (is_valid, message)
    """
    validator = ARGUMENT_VALIDATORS.get(argument)
    if validator:
        return validator(value)
    return True, "No specific validation for this argument"
