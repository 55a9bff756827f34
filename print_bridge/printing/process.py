"""Runs CUPS and conversion utilities without blocking the event loop."""

import asyncio
import subprocess
from dataclasses import dataclass

from print_bridge.errors import IoError, TimedOut


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_text(self) -> str:
        """Best diagnostic available: stderr, then stdout, then the exit code."""
        return (self.stderr or self.stdout or "").strip() or f"exit status {self.returncode}"


def _run(argv: list[str], timeout: float) -> subprocess.CompletedProcess:
    return subprocess.run(argv, capture_output=True, text=True, timeout=timeout)


async def run_command(argv: list[str], timeout: float) -> CommandResult:
    """Run ``argv`` in a worker thread; the child is killed on timeout.

    Raises IoError when the program cannot be started and TimedOut when it
    outlives ``timeout``. A non-zero exit is returned, not raised.
    """
    try:
        completed = await asyncio.to_thread(_run, argv, timeout)
    except subprocess.TimeoutExpired as e:
        raise TimedOut(f"{argv[0]} did not finish within {timeout:g}s") from e
    except OSError as e:
        raise IoError(f"Cannot run {argv[0]}: {e.strerror or e}") from e

    return CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
