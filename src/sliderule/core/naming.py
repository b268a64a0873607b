# naming.py
# SPDX-License-Identifier: MIT
"""Helpers for validating component names and deriving them from URLs."""

from __future__ import annotations

from urllib.parse import urlparse

__all__ = [
    "ComponentNameError",
    "validate_component_name",
    "component_name_from_url",
]

_WINDOWS_FORBIDDEN = r'<>:"/\|?*'
_WINDOWS_RESERVED = {
    "con",
    "prn",
    "aux",
    "nul",
    "com1",
    "com2",
    "com3",
    "com4",
    "com5",
    "com6",
    "com7",
    "com8",
    "com9",
    "lpt1",
    "lpt2",
    "lpt3",
    "lpt4",
    "lpt5",
    "lpt6",
    "lpt7",
    "lpt8",
    "lpt9",
}


class ComponentNameError(ValueError):
    """A component name cannot be used as a directory name."""


def validate_component_name(name: str | None) -> str:
    """Return ``name`` stripped of surrounding blanks if it is a usable directory name.

    Component names become directory names on every platform a project is
    shared to, so the Windows restrictions apply everywhere.

    Raises:
        ComponentNameError: If the name is empty, ``.``/``..``, holds a path
            separator or a character Windows forbids, ends in a dot or
            space, or is a reserved device name.
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise ComponentNameError("Component name must not be empty.")
    if cleaned in (".", ".."):
        raise ComponentNameError(f"Component name {cleaned!r} is not allowed.")
    bad = sorted({ch for ch in cleaned if ch in _WINDOWS_FORBIDDEN or ord(ch) < 32})
    if bad:
        raise ComponentNameError(
            f"Component name {cleaned!r} contains forbidden characters: {''.join(bad)!r}"
        )
    if cleaned.endswith("."):
        raise ComponentNameError(f"Component name {cleaned!r} must not end with a dot.")
    if cleaned.split(".", 1)[0].lower() in _WINDOWS_RESERVED:
        raise ComponentNameError(f"Component name {cleaned!r} is a reserved device name.")
    return cleaned


def component_name_from_url(url: str) -> str:
    """Guess the directory name ``git clone`` or npm will use for ``url``.

    Handles ``https://host/owner/repo.git``, ``git@host:owner/repo.git`` and
    bare ``owner/repo`` forms.

    Raises:
        ComponentNameError: If no usable name can be derived.
    """
    raw = (url or "").strip()
    if "://" in raw:
        try:
            raw = urlparse(raw).path
        except ValueError:
            pass
    elif ":" in raw and "/" not in raw.split(":", 1)[0]:
        # scp-like syntax: user@host:owner/repo.git
        raw = raw.split(":", 1)[1]
    tail = raw.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return validate_component_name(tail)
