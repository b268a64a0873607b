# process.py
# SPDX-License-Identifier: MIT
"""Subprocess plumbing shared by the git and npm clients."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..core.interfaces import OperationResult
from ..core.log import get_logger

log = get_logger(__name__)

__all__ = ["CommandResult", "run_command", "collect_output"]


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def run_command(argv: list[str], *, cwd: Path) -> CommandResult:
    """Run ``argv`` in ``cwd`` and capture its text output.

    Raises:
        FileNotFoundError: If the executable cannot be found.
        OSError: If the process cannot be started.
    """
    log.debug("Running %s in %s", " ".join(argv), cwd)
    proc = subprocess.run(
        argv,
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=False,
    )
    return CommandResult(
        argv=list(argv),
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def collect_output(result: OperationResult, command: CommandResult) -> OperationResult:
    """Copy a finished command's output and exit code into ``result``."""
    if command.stdout.strip():
        result.stdout.append(command.stdout.rstrip())
    if command.stderr.strip():
        result.stderr.append(command.stderr.rstrip())
    if command.returncode != 0:
        log.debug("%s exited with %d", command.argv[0], command.returncode)
        if result.wrapped_status == 0:
            result.wrapped_status = command.returncode
    return result
