# npm.py
# SPDX-License-Identifier: MIT
"""npm wrappers used to install and remove remote components."""

from __future__ import annotations

from pathlib import Path

from ..core.interfaces import STATUS, OperationResult
from ..core.log import get_logger
from .process import collect_output, run_command

log = get_logger(__name__)

__all__ = ["npm_install", "npm_uninstall"]


def _run_npm(argv: list[str], target_dir: Path, action: str) -> OperationResult:
    result = OperationResult()
    try:
        command = run_command(argv, cwd=target_dir)
    except FileNotFoundError as exc:
        return result.fail(
            STATUS["npm_not_found"],
            f"ERROR: `{argv[0]}` was not found, please install npm: {exc}",
        )
    except OSError as exc:
        return result.fail(STATUS["npm_failed"], f"ERROR: npm could not {action}: {exc}")
    return collect_output(result, command)


def npm_install(
    target_dir: Path,
    url: str = "",
    *,
    npm: str = "npm",
    cache: str | None = None,
) -> OperationResult:
    """Install dependencies of ``target_dir``, or add ``url`` as a saved dependency.

    Args:
        target_dir (Path): Component whose manifest npm reads.
        url (str): Remote component to add. Empty installs what the manifest
            already lists.
        npm (str): npm executable.
        cache (str | None): Optional npm cache directory.
    """
    argv = [npm, "install"]
    if url:
        argv += ["--save", url]
    if cache:
        argv += ["--cache", cache]
    result = _run_npm(argv, target_dir, "install dependencies")
    if result.ok:
        result.info(f"Installed {url}." if url else "Dependencies installed.")
    return result


def npm_uninstall(
    target_dir: Path,
    name: str,
    *,
    npm: str = "npm",
    cache: str | None = None,
) -> OperationResult:
    """Remove the saved dependency ``name`` from ``target_dir``."""
    argv = [npm, "uninstall", "--save", name]
    if cache:
        argv += ["--cache", cache]
    result = _run_npm(argv, target_dir, f"uninstall {name}")
    if result.ok:
        result.info(f"Removed remote component {name}.")
    return result
