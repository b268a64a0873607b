# git.py
# SPDX-License-Identifier: MIT
"""Thin wrappers around the ``git`` command line.

Each helper runs one git workflow step in a component directory and
reports through an :class:`OperationResult`: a git that cannot be started
sets ``status``, a git that exits non-zero sets ``wrapped_status``.
Network access and credentials are git's business.
"""

from __future__ import annotations

from pathlib import Path

from ..core.interfaces import STATUS, OperationResult
from ..core.log import get_logger
from ..core.platform import PlatformInfo
from .process import collect_output, run_command

log = get_logger(__name__)

__all__ = [
    "git_init",
    "git_add_and_commit",
    "git_pull",
    "git_clone",
    "git_set_remote_url",
    "git_status",
    "git_diff",
]


def _start_error(exc: OSError, git: str, status_key: str, message: str) -> OperationResult:
    result = OperationResult()
    if isinstance(exc, FileNotFoundError):
        return result.fail(STATUS["git_not_found"], f"ERROR: `{git}` was not found, please install it: {exc}")
    return result.fail(STATUS[status_key], f"ERROR: {message}: {exc}")


def git_init(target_dir: Path, url: str, *, git: str = "git", remote: str = "origin") -> OperationResult:
    """Initialize ``target_dir`` as a repository and point ``remote`` at ``url``."""
    try:
        command = run_command([git, "init"], cwd=target_dir)
    except OSError as exc:
        return _start_error(exc, git, "git_init_failed", "Could not initialize git repository")
    result = collect_output(OperationResult(), command)
    result.info("git repository initialized for project.")

    try:
        command = run_command([git, "remote", "add", remote, url], cwd=target_dir)
    except OSError as exc:
        return result.fail(STATUS["git_remote_failed"], f"ERROR: Unable to set remote URL for project: {exc}")
    collect_output(result, command)
    return result.info("Done initializing git repository for project.")


def git_add_and_commit(
    target_dir: Path,
    message: str,
    *,
    git: str = "git",
    remote: str = "origin",
    branch: str = "master",
    platform: PlatformInfo | None = None,
) -> OperationResult:
    """Stage everything, commit with ``message`` and push to ``remote``/``branch``."""
    platform = platform or PlatformInfo.detect()
    result = OperationResult()

    try:
        command = run_command([git, "add", "."], cwd=target_dir)
    except OSError as exc:
        return result.merge(_start_error(exc, git, "git_add_failed", "Unable to stage changes using git"))
    collect_output(result, command).info("Changes staged using git.")

    # git push can hang on Windows unless sideband is disabled for this repo
    if platform.is_windows:
        try:
            command = run_command([git, "config", "--local", "sendpack.sideband", "false"], cwd=target_dir)
        except OSError as exc:
            return result.fail(
                STATUS["git_sideband_failed"],
                f"ERROR: Unable to disable sendpack.sideband git option: {exc}",
            )
        collect_output(result, command)

    try:
        command = run_command([git, "commit", "-m", message], cwd=target_dir)
    except OSError as exc:
        return result.fail(STATUS["git_commit_failed"], f"ERROR: Unable to commit changes using git: {exc}")
    collect_output(result, command).info("Changes committed using git.")

    try:
        command = run_command([git, "push", remote, branch], cwd=target_dir)
    except OSError as exc:
        return result.fail(
            STATUS["git_push_failed"],
            f"ERROR: Unable to push changes to remote git repository: {exc}",
        )
    collect_output(result, command)
    if command.returncode == 0:
        result.info("Changes pushed using git.")
    return result


def git_pull(target_dir: Path, *, git: str = "git", remote: str = "origin", branch: str = "master") -> OperationResult:
    """Pull the latest changes for the component in ``target_dir``."""
    try:
        command = run_command([git, "pull", remote, branch], cwd=target_dir)
    except OSError as exc:
        return _start_error(exc, git, "git_pull_failed", "Pull from remote repository not successful")
    result = OperationResult()
    # git prints nothing when it is stuck waiting for credentials
    if not command.stdout.strip():
        result.fail(
            STATUS["git_pull_stalled"],
            "ERROR: Pull failed, may be waiting for username/password or passphrase.",
        )
    return collect_output(result, command)


def git_clone(target_dir: Path, url: str, *, git: str = "git") -> OperationResult:
    """Clone ``url`` (with submodules) into a new directory under ``target_dir``."""
    try:
        command = run_command([git, "clone", "--recursive", url], cwd=target_dir)
    except OSError as exc:
        return _start_error(exc, git, "git_clone_failed", "Unable to clone component repository")
    return collect_output(OperationResult(), command)


def git_set_remote_url(target_dir: Path, url: str, *, git: str = "git", remote: str = "origin") -> OperationResult:
    """Point ``remote`` at a new URL."""
    try:
        command = run_command([git, "remote", "set-url", remote, url], cwd=target_dir)
    except OSError as exc:
        return _start_error(
            exc, git, "git_set_url_failed", "Unable to change the URL on the component repository"
        )
    return collect_output(OperationResult(), command)


def git_status(target_dir: Path, *, git: str = "git") -> OperationResult:
    """Summarize changed files in the component."""
    try:
        command = run_command([git, "status"], cwd=target_dir)
    except OSError as exc:
        return _start_error(exc, git, "git_status_failed", "Unable to get the status of the component repository")
    return collect_output(OperationResult(), command)


def git_diff(target_dir: Path, *, git: str = "git") -> OperationResult:
    """Show line-level changes in the component."""
    try:
        command = run_command([git, "--no-pager", "diff"], cwd=target_dir)
    except OSError as exc:
        return _start_error(exc, git, "git_diff_failed", "Unable to diff the component repository")
    return collect_output(OperationResult(), command)
