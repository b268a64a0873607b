# interfaces.py
# SPDX-License-Identifier: MIT
"""Result types shared by component operations and tool clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

__all__ = ["OperationResult", "STATUS"]


# Status codes reported by operations. External tool exit codes are carried
# separately in OperationResult.wrapped_status.
STATUS = {
    "not_a_repository": 1,
    "amalgamation_failed": 2,
    "marker_missing": 3,
    "marker_read_failed": 4,
    "marker_write_failed": 5,
    "walk_failed": 6,
    "metadata_failed": 7,
    "permissions_failed": 8,
    "delete_failed": 9,
    "component_missing": 10,
    "component_dir_failed": 11,
    "components_dir_failed": 12,
    "dist_dir_failed": 13,
    "docs_dir_failed": 14,
    "source_dir_failed": 15,
    "readme_failed": 16,
    "bom_failed": 17,
    "manifest_failed": 18,
    "gitignore_failed": 19,
    "marker_failed": 20,
    "invalid_name": 21,
    "git_pull_failed": 100,
    "git_pull_stalled": 101,
    "git_clone_failed": 102,
    "git_add_failed": 103,
    "git_commit_failed": 104,
    "git_push_failed": 105,
    "git_not_found": 106,
    "git_init_failed": 107,
    "git_remote_failed": 108,
    "git_sideband_failed": 109,
    "git_set_url_failed": 110,
    "git_status_failed": 111,
    "git_diff_failed": 112,
    "npm_not_found": 200,
    "npm_failed": 201,
}


@dataclass(slots=True)
class OperationResult:
    """
    Outcome of a component operation or a single external command.

    Attributes:
        status (int): 0 on success, otherwise one of :data:`STATUS`.
        wrapped_status (int): Non-zero exit code of the external tool that
            failed, if any.
        stdout (list[str]): Messages meant for the user.
        stderr (list[str]): Errors and tool diagnostics.
    """

    status: int = 0
    wrapped_status: int = 0
    stdout: List[str] = field(default_factory=list)
    stderr: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == 0 and self.wrapped_status == 0

    def fail(self, status: int, message: str) -> "OperationResult":
        """Record an error. The first failure's status is the one kept."""
        if self.status == 0:
            self.status = status
        self.stderr.append(message)
        return self

    def info(self, message: str) -> "OperationResult":
        self.stdout.append(message)
        return self

    def merge(self, other: "OperationResult") -> "OperationResult":
        """Append ``other``'s messages and keep the first non-zero statuses.

        A later failure never overwrites an earlier one, so the code that is
        reported points at the step that went wrong first.
        """
        self.stdout.extend(other.stdout)
        self.stderr.extend(other.stderr)
        if self.status == 0 and other.status != 0:
            self.status = other.status
        if self.wrapped_status == 0 and other.wrapped_status != 0:
            self.wrapped_status = other.wrapped_status
        return self
