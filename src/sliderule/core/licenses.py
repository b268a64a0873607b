# licenses.py
# SPDX-License-Identifier: MIT
"""License amalgamation across a component hierarchy.

Every component records two SPDX identifiers in its marker file: one for
source (hardware design files, firmware) and one for documentation. The
manifest at the top of a component carries the combined expression for the
whole subtree::

    (Unlicense AND MIT AND CC0-1.0 AND CC-BY-4.0)

Source terms come first, then documentation terms; each category is
deduplicated on its own, keeping the order in which the walk first met
each value.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .hierarchy import find_markers
from .keyvalue import get_values, update_value
from .log import get_logger
from .platform import PlatformInfo

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .config import SlideruleConfig

log = get_logger(__name__)

__all__ = [
    "SOURCE_LICENSE_KEY",
    "DOC_LICENSE_KEY",
    "MANIFEST_LICENSE_KEY",
    "DEFAULT_SOURCE_LICENSE",
    "DEFAULT_DOC_LICENSE",
    "SPDX_LICENSE_IDS",
    "LicenseTerms",
    "collect_license_terms",
    "build_license_expression",
    "amalgamate_licenses",
    "list_all_licenses",
    "get_licenses",
    "is_known_license_id",
    "is_valid_license_expression",
]

SOURCE_LICENSE_KEY = "source_license"
DOC_LICENSE_KEY = "documentation_license"
MANIFEST_LICENSE_KEY = "license"

DEFAULT_SOURCE_LICENSE = "Unlicense"
DEFAULT_DOC_LICENSE = "CC0-1.0"

CC_LICENSE_IDS = (
    "CC0-1.0",
    "CC-BY-4.0",
    "CC-BY-SA-4.0",
    "CC-BY-ND-4.0",
    "CC-BY-NC-4.0",
    "CC-BY-NC-SA-4.0",
    "CC-BY-NC-ND-4.0",
    "CC-BY-3.0",
    "CC-BY-SA-3.0",
    "CC-BY-2.0",
    "CC-BY-SA-2.0",
    "CC-BY-2.5",
    "CC-BY-SA-2.5",
)

# Open hardware licenses show up alongside the usual software ones.
HARDWARE_LICENSE_IDS = (
    "CERN-OHL-1.1",
    "CERN-OHL-1.2",
    "CERN-OHL-P-2.0",
    "CERN-OHL-S-2.0",
    "CERN-OHL-W-2.0",
    "SHL-0.5",
    "SHL-0.51",
    "SHL-2.0",
    "SHL-2.1",
    "TAPR-OHL-1.0",
)

SOFTWARE_LICENSE_IDS = (
    "0BSD",
    "AAL",
    "AGPL-3.0-only",
    "AGPL-3.0-or-later",
    "Apache-2.0",
    "BSD-2-Clause",
    "BSD-2-Clause-Patent",
    "BSD-3-Clause",
    "BSD-3-Clause-Clear",
    "BSD-4-Clause",
    "BSL-1.0",
    "EPL-2.0",
    "EUPL-1.2",
    "GPL-2.0-only",
    "GPL-2.0-or-later",
    "GPL-3.0-only",
    "GPL-3.0-or-later",
    "ISC",
    "LGPL-2.1-only",
    "LGPL-2.1-or-later",
    "LGPL-3.0-only",
    "LGPL-3.0-or-later",
    "MIT",
    "MIT-0",
    "MPL-2.0",
    "Unlicense",
    "Zlib",
)

SPDX_LICENSE_IDS = frozenset(CC_LICENSE_IDS + HARDWARE_LICENSE_IDS + SOFTWARE_LICENSE_IDS)

LICENSE_REF_RE = re.compile(
    r"^(?:LicenseRef|DocumentRef-[A-Za-z0-9\.\-]+:LicenseRef)-[A-Za-z0-9\.\-]+$"
)


@dataclass(slots=True)
class LicenseTerms:
    """Distinct license values found in a component hierarchy.

    Attributes:
        source (list[str]): Source licenses in first-seen order.
        documentation (list[str]): Documentation licenses in first-seen
            order.
        missing (list[tuple[Path, str]]): Marker files that had no value
            for a key, paired with that key.
    """

    source: list[str] = field(default_factory=list)
    documentation: list[str] = field(default_factory=list)
    missing: list[tuple[Path, str]] = field(default_factory=list)

    def add(self, marker: Path, source_value: str, doc_value: str) -> None:
        """Fold one marker's values into the ordered-unique lists."""
        for key, value, bucket in (
            (SOURCE_LICENSE_KEY, source_value, self.source),
            (DOC_LICENSE_KEY, doc_value, self.documentation),
        ):
            if not value:
                self.missing.append((marker, key))
                continue
            if value not in bucket:
                bucket.append(value)

    def expression(self) -> str:
        return build_license_expression(self.source, self.documentation)


def build_license_expression(source_terms: Sequence[str], doc_terms: Sequence[str]) -> str:
    """Join source and documentation terms into one parenthesized AND expression.

    >>> build_license_expression(["MIT"], ["CC0-1.0"])
    '(MIT AND CC0-1.0)'
    >>> build_license_expression(["MIT"], [])
    '(MIT)'
    """
    joiner = " AND " if source_terms and doc_terms else ""
    return "(" + " AND ".join(source_terms) + joiner + " AND ".join(doc_terms) + ")"


def collect_license_terms(markers: Iterable[str | Path]) -> LicenseTerms:
    """Read both license keys from each marker, in the order given.

    Raises:
        FileNotFoundError: If a marker disappears before it is read.
        FileReadError: If a marker cannot be read.
    """
    terms = LicenseTerms()
    for marker in markers:
        path = Path(marker)
        values = get_values(path, (SOURCE_LICENSE_KEY, DOC_LICENSE_KEY))
        terms.add(path, values[SOURCE_LICENSE_KEY], values[DOC_LICENSE_KEY])
    return terms


def _file_names(config: "SlideruleConfig | None") -> tuple[str, str, int, bool]:
    if config is None:
        from .config import ComponentConfig

        comp = ComponentConfig()
    else:
        comp = config.component
    return comp.marker_file, comp.manifest_file, comp.max_depth, comp.strict_walk


def amalgamate_licenses(root: str | Path, *, config: "SlideruleConfig | None" = None) -> str:
    """Recompute the license expression for ``root`` and store it in its manifest.

    Markers without a value for a key contribute no term for that key; each
    such gap is logged as a warning. Running this twice with no change in
    between leaves the manifest byte-identical.

    Args:
        root (str | Path): Component directory whose subtree is amalgamated.
        config (SlideruleConfig | None): Supplies marker/manifest file
            names and walk limits. Defaults apply when omitted.

    Returns:
        str: The expression written (or that would have been written when
        the manifest has no ``license`` line).

    Raises:
        DirectoryAccessError: If ``root`` cannot be walked.
        FileNotFoundError: If the manifest does not exist.
        FileReadError: If a marker or the manifest cannot be read.
        FileWriteError: If the manifest cannot be rewritten.
    """
    marker_name, manifest_name, max_depth, strict = _file_names(config)
    root_path = Path(root)
    markers = find_markers(root_path, marker_name=marker_name, max_depth=max_depth, strict=strict)
    terms = collect_license_terms(markers)
    for marker, key in terms.missing:
        log.warning("%s has no %s value; leaving it out of the license expression", marker, key)

    expression = terms.expression()
    if not is_valid_license_expression(expression):
        log.warning("Amalgamated license %s is not a well-formed SPDX expression", expression)

    manifest = root_path / manifest_name
    if update_value(manifest, MANIFEST_LICENSE_KEY, expression):
        log.info("Updated %s license to %s", manifest, expression)
    else:
        log.warning("%s has no %r line; license not recorded", manifest, MANIFEST_LICENSE_KEY)
    return expression


def list_all_licenses(
    root: str | Path,
    *,
    config: "SlideruleConfig | None" = None,
    platform: PlatformInfo | None = None,
) -> str:
    """Describe where every license in the hierarchy under ``root`` is declared."""
    marker_name, _, max_depth, strict = _file_names(config)
    nl = (platform or PlatformInfo.detect()).newline
    lines = ["Licenses Specified In This Component:"]
    for marker in find_markers(root, marker_name=marker_name, max_depth=max_depth, strict=strict):
        values = get_values(marker, (SOURCE_LICENSE_KEY, DOC_LICENSE_KEY))
        lines.append(
            f"Path: {marker}, Source License: {values[SOURCE_LICENSE_KEY]}, "
            f"Documentation License: {values[DOC_LICENSE_KEY]}"
        )
    return nl.join(lines) + nl


def get_licenses(directory: str | Path, *, config: "SlideruleConfig | None" = None) -> tuple[str, str]:
    """Return ``(source_license, documentation_license)`` for one component.

    Falls back to the configured defaults when ``directory`` has no marker.
    """
    marker_name, _, _, _ = _file_names(config)
    if config is None:
        source, doc = DEFAULT_SOURCE_LICENSE, DEFAULT_DOC_LICENSE
    else:
        source = config.component.default_source_license
        doc = config.component.default_doc_license
    marker = Path(directory) / marker_name
    if not marker.is_file():
        return source, doc
    values = get_values(marker, (SOURCE_LICENSE_KEY, DOC_LICENSE_KEY))
    return values[SOURCE_LICENSE_KEY], values[DOC_LICENSE_KEY]


def is_known_license_id(token: str) -> bool:
    """Return True for a listed SPDX identifier or a ``LicenseRef-`` reference."""
    if token in SPDX_LICENSE_IDS:
        return True
    return bool(LICENSE_REF_RE.match(token))


def _tokenize_spdx(expr: str) -> list[str]:
    """Split an SPDX expression into parentheses and whitespace-separated words."""
    tokens: list[str] = []
    i = 0
    while i < len(expr):
        ch = expr[i]
        if ch.isspace():
            i += 1
            continue
        if ch in "()":
            tokens.append(ch)
            i += 1
            continue
        j = i
        while j < len(expr) and not expr[j].isspace() and expr[j] not in "()":
            j += 1
        tokens.append(expr[i:j])
        i = j
    return tokens


def is_valid_license_expression(expr: str) -> bool:
    """Check operator/operand alternation and balanced parentheses.

    Operands are not checked against the SPDX list here, so custom
    identifiers still pass; ``()`` and ``(MIT AND)`` do not.
    """
    depth = 0
    expect_operand = True
    for token in _tokenize_spdx(expr):
        upper = token.upper()
        if expect_operand:
            if token == "(":
                depth += 1
                continue
            if token == ")" or upper in ("AND", "OR", "WITH"):
                return False
            expect_operand = False
            continue
        if upper in ("AND", "OR", "WITH"):
            expect_operand = True
            continue
        if token == ")":
            if depth == 0:
                return False
            depth -= 1
            continue
        return False
    return not expect_operand and depth == 0
