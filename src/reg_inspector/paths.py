"""
Registry paths and the search-term matcher.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from reg_inspector.exceptions import InvalidArgumentError

SEPARATOR = "\\"


@dataclass(frozen=True)
class RegPath:
    """A key path below a hive: an ordered tuple of non-empty segments."""
    segments: Tuple[str, ...] = ()

    def __post_init__(self):
        for segment in self.segments:
            if not segment:
                raise InvalidArgumentError("Path segments cannot be empty", argument="path")

    @classmethod
    def parse(cls, text: Optional[str]) -> "RegPath":
        """Split a rendered path, dropping empty pieces left by doubled or trailing separators."""
        if not text:
            return cls()
        return cls(tuple(part for part in text.split(SEPARATOR) if part))

    def child(self, segment: str) -> "RegPath":
        """Return the path of a direct child."""
        return RegPath(self.segments + (segment,))

    def join(self, other: "RegPath") -> "RegPath":
        return RegPath(self.segments + other.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


class Hive(Enum):
    """The predefined root keys of the registry."""
    HKEY_CLASSES_ROOT = "HKCR"
    HKEY_CURRENT_USER = "HKCU"
    HKEY_LOCAL_MACHINE = "HKLM"
    HKEY_USERS = "HKU"
    HKEY_CURRENT_CONFIG = "HKCC"

    @property
    def short_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Hive":
        """Resolve a full (HKEY_LOCAL_MACHINE) or short (HKLM) hive name."""
        if name:
            key = name.strip().upper()
            for hive in cls:
                if key in (hive.name, hive.value):
                    return hive
        raise InvalidArgumentError(
            f"Unknown root key: {name!r}",
            argument="hive",
            remediation="Use one of: " + ", ".join(h.name for h in cls),
        )


@dataclass(frozen=True)
class NodeRoot:
    """Anchor for enumeration: a hive plus an optional base path.

    Paths handed to and returned from the enumerator are relative to it.
    """
    hive: Hive
    base: RegPath = RegPath()

    def resolve(self, path: RegPath) -> RegPath:
        """Full path below the hive."""
        return self.base.join(path)

    def describe(self, path: RegPath = RegPath()) -> str:
        full = self.resolve(path)
        if full.is_root:
            return self.hive.name
        return f"{self.hive.name}{SEPARATOR}{full}"


def _check_term(term: Optional[str]) -> None:
    if not term:
        raise InvalidArgumentError("Search term cannot be empty", argument="term")


def matches(candidate: Union[RegPath, str], term: str) -> bool:
    """Check whether a path matches a search term.

    The rendered path matches when some occurrence of ``term`` is followed
    by the end of the string or a separator. Nothing is required before
    the occurrence, so "EST" matches "SOFTWARE\\TEST".

    Args:
        candidate: RegPath or an already rendered path string
        term: Non-empty search term

    Returns:
        True if the path matches
    """
    _check_term(term)
    rendered = str(candidate)
    position = rendered.find(term)
    while position >= 0:
        end = position + len(term)
        if end == len(rendered) or rendered[end] == SEPARATOR:
            return True
        position = rendered.find(term, position + 1)
    return False


def filter_paths(paths: Iterable[RegPath], term: str) -> List[RegPath]:
    """Keep the paths matching ``term``, in their original order."""
    _check_term(term)
    return [path for path in paths if matches(path, term)]
