# hierarchy.py
# SPDX-License-Identifier: MIT
"""Component hierarchy discovery.

A directory is a component when it holds a marker file (``.sr`` by
default). Components nest at any depth, typically under ``components/``
or inside ``node_modules/`` once installed through npm.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from .log import get_logger

log = get_logger(__name__)

__all__ = [
    "DEFAULT_MARKER_NAME",
    "DEFAULT_MAX_DEPTH",
    "DirectoryAccessError",
    "iter_markers",
    "find_markers",
    "is_component",
    "get_parent_dir",
    "get_level",
]

DEFAULT_MARKER_NAME = ".sr"
# Guards against pathological trees; symlinks are never followed anyway.
DEFAULT_MAX_DEPTH = 100


class DirectoryAccessError(OSError):
    """A directory needed for a walk is missing or unreadable."""

    def __init__(self, path: str | Path, reason: str | None = None) -> None:
        self.path = Path(path)
        msg = f"Cannot access directory {self.path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


def _normalize_root(root: str | Path) -> Path:
    return Path(os.path.abspath(os.fspath(root)))


def iter_markers(
    root: str | Path,
    *,
    marker_name: str = DEFAULT_MARKER_NAME,
    max_depth: int = DEFAULT_MAX_DEPTH,
    strict: bool = False,
) -> Iterator[Path]:
    """Yield marker files under ``root``, top-down with sibling names sorted.

    Entries directly inside ``root`` are at depth 1. Directories are
    descended into while their children stay within ``max_depth``.

    Args:
        root (str | Path): Directory to walk. It need not be a component.
        marker_name (str): File name identifying a component.
        max_depth (int): Deepest entry level that is inspected.
        strict (bool): When False, unreadable subdirectories are skipped.
            When True, the first unreadable subdirectory aborts the walk.

    Yields:
        Path: Absolute path of each marker file.

    Raises:
        DirectoryAccessError: If ``root`` is missing, is not a directory, or
            cannot be listed; or, in strict mode, a subdirectory cannot be
            listed.
    """
    walk_root = _normalize_root(root)
    if not walk_root.is_dir():
        raise DirectoryAccessError(walk_root, "not an existing directory")

    def _on_error(exc: OSError) -> None:
        failed = Path(exc.filename) if exc.filename else walk_root
        if failed == walk_root or strict:
            raise DirectoryAccessError(failed, exc.strerror or str(exc)) from exc
        log.debug("Skipping unreadable directory %s: %s", failed, exc)

    for dirpath, dirnames, filenames in os.walk(walk_root, topdown=True, onerror=_on_error, followlinks=False):
        dirnames.sort()
        filenames.sort()
        dpath = Path(dirpath)
        depth = len(dpath.relative_to(walk_root).parts) + 1
        if depth >= max_depth:
            dirnames.clear()
        if marker_name in filenames and not (dpath / marker_name).is_symlink():
            yield dpath / marker_name


def find_markers(
    root: str | Path,
    *,
    marker_name: str = DEFAULT_MARKER_NAME,
    max_depth: int = DEFAULT_MAX_DEPTH,
    strict: bool = False,
) -> list[Path]:
    """Return every marker file under ``root`` sorted by path string.

    Directory enumeration order differs between operating systems and
    filesystems. Sorting on ``str(path)`` makes "first discovered" mean the
    same thing everywhere, which license deduplication relies on.

    See :func:`iter_markers` for the arguments and failure modes.
    """
    markers = iter_markers(root, marker_name=marker_name, max_depth=max_depth, strict=strict)
    return sorted(markers, key=str)


def is_component(directory: str | Path, *, marker_name: str = DEFAULT_MARKER_NAME) -> bool:
    """Return True when ``directory`` holds a marker file."""
    return (Path(directory) / marker_name).is_file()


def get_parent_dir(directory: str | Path) -> Path:
    """Return the directory that contains ``directory``."""
    path = _normalize_root(directory)
    if path.parent == path:
        raise ValueError(f"{path} has no parent directory")
    return path.parent


def get_level(directory: str | Path, *, marker_name: str = DEFAULT_MARKER_NAME) -> int:
    """Classify where ``directory`` sits in a component hierarchy.

    Nested components live one level below their parent's ``components``
    (or ``node_modules``) directory, so every ancestor is checked rather
    than only the immediate parent.

    Returns:
        int: 0 when neither ``directory`` nor any ancestor is a component (a
        top-level component is probably about to be created), 1 for a
        top-level component, 2 for anything inside another component.
    """
    path = _normalize_root(directory)
    here = is_component(path, marker_name=marker_name)
    parent = any(is_component(p, marker_name=marker_name) for p in path.parents)
    if not here and not parent:
        return 0
    if here and not parent:
        return 1
    return 2
