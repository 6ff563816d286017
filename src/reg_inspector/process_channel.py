"""
Process channel for running an external tool and capturing its output.

The child writes stdout and stderr into one pipe and reads stdin from the
same pipe. The caller waits for the child to exit and then takes a single
read of at most ``capacity - 1`` bytes. Anything beyond that is dropped.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Union

from reg_inspector.config import DEFAULT_CAPTURE_BUFFER_SIZE
from reg_inspector.exceptions import InvalidArgumentError, ProcessChannelError
from reg_inspector.logging_config import get_logger

logger = get_logger("process_channel")


@dataclass(frozen=True)
class CapturedOutput:
    """Bytes captured from one run of an external command."""
    data: bytes
    capacity: int
    returncode: int

    @property
    def text(self) -> str:
        """Decoded output; undecodable bytes are replaced."""
        return self.data.decode("utf-8", errors="replace")

    @property
    def terminated(self) -> bytes:
        """The capture as a NUL-terminated buffer."""
        return self.data + b"\x00"

    @property
    def filled(self) -> bool:
        """True when the capture hit the buffer bound and may be truncated."""
        return len(self.data) >= self.capacity - 1

    def __len__(self) -> int:
        return len(self.data)


def split_command(command_line: str) -> Union[str, List[str]]:
    """Prepare a command line for Popen.

    Windows takes the raw string, POSIX needs an argument list.
    """
    if os.name == "nt":
        return command_line
    return shlex.split(command_line)


def _close(fd: Optional[int]) -> None:
    if fd is None:
        return
    try:
        os.close(fd)
    except OSError:
        pass


def run_command(
    command_line: str,
    capacity: int = DEFAULT_CAPTURE_BUFFER_SIZE,
    timeout: Optional[float] = None,
) -> CapturedOutput:
    """Run a command and capture its combined output.

    Args:
        command_line: Command to run, as it would be typed in a shell
        capacity: Buffer size; at most ``capacity - 1`` bytes are returned
        timeout: Seconds to wait for the child, or None to wait forever

    Returns:
        CapturedOutput with the bytes read

    Raises:
        InvalidArgumentError: Empty command or capacity below 2
        ProcessChannelError: The pipe, the spawn, the wait or the read failed
    """
    if not command_line or not command_line.strip():
        raise InvalidArgumentError("Command line cannot be empty", argument="command_line")
    if capacity < 2:
        raise InvalidArgumentError(
            f"Capture capacity must be at least 2, got {capacity}", argument="capacity"
        )

    try:
        args = split_command(command_line)
    except ValueError as e:
        raise ProcessChannelError("Cannot parse command line", command=command_line, details=str(e))

    read_fd: Optional[int] = None
    write_fd: Optional[int] = None
    process: Optional[subprocess.Popen] = None
    try:
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise ProcessChannelError("Cannot create pipe", command=command_line, details=str(e))

        try:
            process = subprocess.Popen(
                args,
                stdin=read_fd,
                stdout=write_fd,
                stderr=write_fd,
            )
        except (OSError, ValueError) as e:
            raise ProcessChannelError("Cannot start process", command=command_line, details=str(e))
        logger.debug("Started pid %s: %s", process.pid, command_line)

        # The child holds its own copy; ours would keep an empty read blocking
        _close(write_fd)
        write_fd = None

        try:
            returncode = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            raise ProcessChannelError(
                f"Command did not finish within {timeout} seconds",
                command=command_line,
                remediation="Raise process_timeout in config.yaml or REG_INSPECTOR_TIMEOUT",
            )

        try:
            data = os.read(read_fd, capacity - 1)
        except OSError as e:
            raise ProcessChannelError("Cannot read process output", command=command_line, details=str(e))
    finally:
        _close(write_fd)
        _close(read_fd)
        if process is not None and process.returncode is None:
            process.kill()
            process.wait()

    captured = CapturedOutput(data=data, capacity=capacity, returncode=returncode)
    logger.debug("pid %s exited with %s, captured %d bytes", process.pid, returncode, len(captured))
    if captured.filled:
        logger.info("Output of '%s' reached the %d byte buffer and may be truncated", command_line, capacity)
    return captured
