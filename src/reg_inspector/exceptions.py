"""
reg-inspector Exceptions

Custom exception types carrying remediation hints and CLI exit codes.
"""

from typing import Optional


class RegInspectorError(Exception):
    """Base exception for all reg-inspector errors."""

    def __init__(
        self,
        message: str,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            remediation: Suggested fix for the user
            details: Technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details = details

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.remediation:
            parts.append(f"To fix: {self.remediation}")
        return "\n".join(parts)


class ConfigError(RegInspectorError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.config_key = config_key
        if not remediation and config_key:
            remediation = f"Check the value of '{config_key}' in config.yaml or the environment"
        super().__init__(message, remediation, details)


class InvalidArgumentError(RegInspectorError):
    """Malformed or missing caller input."""

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.argument = argument
        if not remediation and argument:
            remediation = f"Provide a valid value for '{argument}'"
        super().__init__(message, remediation, details)


class NodeUnreachableError(RegInspectorError):
    """A node could not be opened or enumerated in the store."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.path = path
        if not remediation and path is not None:
            remediation = f"Check that '{path}' exists and that you have permission to open it"
        super().__init__(message, remediation, details)


class AllocationFailureError(RegInspectorError):
    """Growing a result list could not be satisfied."""


class ProcessChannelError(RegInspectorError):
    """Pipe creation, process spawn or output read failed."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.command = command
        if not remediation and command:
            remediation = f"Make sure the command can be run from a shell: {command}"
        super().__init__(message, remediation, details)


class FlagNotFoundError(RegInspectorError):
    """A flag name does not appear in the tool output."""

    def __init__(
        self,
        message: str,
        flag: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.flag = flag
        super().__init__(message, remediation, details)


class FlagValueMissingError(RegInspectorError):
    """A flag name appears in the tool output with no value after it."""

    def __init__(
        self,
        message: str,
        flag: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.flag = flag
        super().__init__(message, remediation, details)


class NoNodesEnumeratedError(RegInspectorError):
    """The root was reachable but has nothing beneath it."""


# Error code mapping for CLI exit codes
ERROR_CODES = {
    ConfigError: 10,
    InvalidArgumentError: 11,
    NodeUnreachableError: 12,
    AllocationFailureError: 13,
    ProcessChannelError: 14,
    FlagNotFoundError: 15,
    FlagValueMissingError: 16,
    NoNodesEnumeratedError: 17,
    RegInspectorError: 1,
}


def get_error_code(error: Exception) -> int:
    """Get the exit code for an error type."""
    for error_type, code in ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return 1
