# keyvalue.py
# SPDX-License-Identifier: MIT
"""Line-scoped ``key: value`` access for marker and manifest files.

Both the ``.sr`` marker (``source_license: MIT,``) and the JSON-shaped
``package.json`` manifest (``"license": "MIT",``) keep one key per line.
Values are read and rewritten one line at a time without parsing the
document, so every byte outside the targeted value survives a rewrite.

Matching is by exact key token: ``license`` does not match a
``source_license`` line. When several lines carry the same key the last one
wins on read, and every one of them is rewritten on update.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

from .log import get_logger

log = get_logger(__name__)

__all__ = [
    "FileReadError",
    "FileWriteError",
    "split_lines",
    "extract_value",
    "replace_value",
    "get_value",
    "get_values",
    "update_value",
]

_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z")


class FileReadError(OSError):
    """A key-value file exists but could not be read or decoded."""


class FileWriteError(OSError):
    """A key-value file could not be written back."""


@lru_cache(maxsize=64)
def _key_pattern(key: str) -> re.Pattern[str]:
    # head: indentation, optionally quoted key, colon, spacing, opening quote
    # tail: closing quote, trailing comma, trailing blanks
    return re.compile(
        r'^(?P<head>\s*"?' + re.escape(key) + r'"?\s*:[ \t]*"?)'
        r"(?P<value>.*?)"
        r'(?P<tail>"?[ \t]*,?[ \t]*)$'
    )


def split_lines(text: str) -> list[str]:
    """Split ``text`` into lines that keep their own terminators.

    ``"".join(split_lines(text)) == text`` holds for any input.
    """
    return _LINE_RE.findall(text)


def _strip_terminator(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def extract_value(line: str, key: str) -> str | None:
    """Return the value held by ``line`` for ``key``, or None if the line is for another key."""
    body, _ = _strip_terminator(line)
    match = _key_pattern(key).match(body)
    if match is None:
        return None
    return match.group("value").strip()


def replace_value(line: str, key: str, new_value: str) -> str | None:
    """Return ``line`` with its ``key`` value swapped for ``new_value``.

    Key, quoting, trailing comma and line terminator are preserved. Returns
    None when the line does not hold ``key``.
    """
    body, ending = _strip_terminator(line)
    match = _key_pattern(key).match(body)
    if match is None:
        return None
    head = match.group("head")
    value = match.group("value")
    if not value and head.endswith(":"):
        head += " "
    # keep any blanks that surround the current value inside the quotes
    stripped = value.strip()
    if stripped:
        start = value.index(stripped)
        new_inner = value[:start] + new_value + value[start + len(stripped):]
    else:
        new_inner = new_value
    return f"{head}{new_inner}{match.group('tail')}{ending}"


def _read_text(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(f"Could not read {path}: {exc}") from exc


def _write_text(path: Path, text: str) -> None:
    # the target is only replaced once the sibling temp file is complete
    tmp_path = path.parent / f"{path.name}.tmp"
    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise FileWriteError(f"Could not write {path}: {exc}") from exc


def get_values(path: str | Path, keys: Iterable[str]) -> dict[str, str]:
    """Read several keys from one file in a single pass.

    Args:
        path (str | Path): Marker or manifest file.
        keys (Iterable[str]): Keys to look up.

    Returns:
        dict[str, str]: Value per key; keys without a matching line map to
        the empty string.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        FileReadError: If ``path`` cannot be read or decoded.
    """
    p = Path(path)
    wanted = list(dict.fromkeys(keys))
    values = {key: "" for key in wanted}
    for line in split_lines(_read_text(p)):
        for key in wanted:
            found = extract_value(line, key)
            if found is not None:
                values[key] = found
    return values


def get_value(path: str | Path, key: str) -> str:
    """Return the value of ``key`` in ``path``; the last matching line wins.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        FileReadError: If ``path`` cannot be read or decoded.
    """
    return get_values(path, (key,))[key]


def update_value(path: str | Path, key: str, new_value: str) -> bool:
    """Rewrite the value of every ``key`` line in ``path``.

    Lines are replaced by position, so identical lines elsewhere in the file
    are never touched. The file is written once, and only when at least one
    line matched.

    Args:
        path (str | Path): Marker or manifest file.
        key (str): Key whose value should change.
        new_value (str): Replacement value, written without added quoting.

    Returns:
        bool: True when the file was rewritten, False when no line held
        ``key`` (the file is left untouched).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        FileReadError: If ``path`` cannot be read or decoded.
        FileWriteError: If the new contents cannot be written.
    """
    p = Path(path)
    lines = split_lines(_read_text(p))
    matched = False
    for idx, line in enumerate(lines):
        replaced = replace_value(line, key, new_value)
        if replaced is None:
            continue
        lines[idx] = replaced
        matched = True
    if not matched:
        log.debug("No %r line in %s; leaving it unchanged", key, p)
        return False
    _write_text(p, "".join(lines))
    return True
