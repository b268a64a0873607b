# templates.py
# SPDX-License-Identifier: MIT
"""Boilerplate files written into new components.

Templates are Jinja2 strings rendered with the host's line ending. The
``generate_*`` helpers never overwrite a file that already exists: a user's
README or manifest always wins over the template.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError

from .interfaces import STATUS, OperationResult
from .log import get_logger
from .platform import PlatformInfo

log = get_logger(__name__)

__all__ = [
    "TemplateRenderError",
    "TEMPLATES",
    "render_template",
    "generate_readme",
    "generate_bom",
    "generate_manifest",
    "generate_gitignore",
    "generate_marker",
]


class TemplateRenderError(RuntimeError):
    """A template failed to render or produced invalid output."""


README_TEMPLATE = """\
# {{ name }}
New Sliderule component.

---
Developed in [Sliderule](http://sliderule.io) an implementation of the [Distributed OSHW Framework](http://dof.sliderule.io).
"""

BOM_TEMPLATE = """\
# Bill of Materials Data for {{ name }}
parts:
  component_1:
    options:
    - specific_component_variation
    default_option: 0
    quantity: 1
    quantity_units: part
    name: Sample Component
    notes: ''

order:
  - component_1
"""

MANIFEST_TEMPLATE = """\
{
  "name": "{{ name }}",
  "version": "1.0.0",
  "description": "Sliderule DOF component.",
  "license": "{{ license }}",
  "dependencies": {
  }
}
"""

GITIGNORE_TEMPLATE = """\
# Dependency directories
node_modules/

# Distribution directory
dist/
"""

MARKER_TEMPLATE = """\
source_license: {{ source_license }},
documentation_license: {{ doc_license }}
"""

TEMPLATES = {
    "README.md": README_TEMPLATE,
    "bom_data.yaml": BOM_TEMPLATE,
    "package.json": MANIFEST_TEMPLATE,
    ".gitignore": GITIGNORE_TEMPLATE,
    ".sr": MARKER_TEMPLATE,
}

_YAML_TEMPLATES = {"bom_data.yaml"}


def _environment(platform: PlatformInfo) -> Environment:
    return Environment(  # nosec B701 - renders Markdown/YAML/JSON, not HTML
        loader=BaseLoader(),
        keep_trailing_newline=True,
        newline_sequence=platform.newline,
        undefined=StrictUndefined,
        autoescape=False,
    )


def render_template(name: str, /, *, platform: PlatformInfo | None = None, **context: Any) -> str:
    """Render one of :data:`TEMPLATES` with ``context``.

    Args:
        name (str): Template key, e.g. ``"package.json"``.
        platform (PlatformInfo | None): Supplies the line ending. Detected
            from the host when omitted.
        **context: Template variables. Every variable the template uses
            must be supplied.

    Returns:
        str: Rendered text.

    Raises:
        TemplateRenderError: For an unknown template, a missing variable, or
            YAML output that does not parse.
    """
    source = TEMPLATES.get(name)
    if source is None:
        raise TemplateRenderError(f"Unknown template {name!r}; expected one of {sorted(TEMPLATES)}")
    env = _environment(platform or PlatformInfo.detect())
    try:
        rendered = env.from_string(source).render(**context)
    except TemplateError as exc:
        raise TemplateRenderError(f"Could not render {name}: {exc}") from exc
    if name in _YAML_TEMPLATES:
        try:
            yaml.safe_load(rendered)
        except yaml.YAMLError as exc:
            raise TemplateRenderError(f"Rendered {name} is not valid YAML: {exc}") from exc
    return rendered


def _generate(
    target: Path,
    template: str,
    status_key: str,
    *,
    platform: PlatformInfo | None,
    **context: Any,
) -> OperationResult:
    result = OperationResult()
    if target.exists():
        return result.info(f"{target.name} already exists, using existing file and refusing to overwrite.")
    try:
        contents = render_template(template, platform=platform, **context)
    except TemplateRenderError as exc:
        return result.fail(STATUS[status_key], f"ERROR: {exc}")
    try:
        # newline="" keeps the rendered line endings as they are
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(contents)
    except OSError as exc:
        return result.fail(STATUS[status_key], f"ERROR: Could not write to {target.name}: {exc}")
    log.debug("Wrote %s", target)
    return result


def generate_readme(
    target_dir: Path, name: str, *, file_name: str = "README.md", platform: PlatformInfo | None = None
) -> OperationResult:
    return _generate(target_dir / file_name, "README.md", "readme_failed", platform=platform, name=name)


def generate_bom(
    target_dir: Path, name: str, *, file_name: str = "bom_data.yaml", platform: PlatformInfo | None = None
) -> OperationResult:
    return _generate(target_dir / file_name, "bom_data.yaml", "bom_failed", platform=platform, name=name)


def generate_manifest(
    target_dir: Path,
    name: str,
    license: str,
    *,
    file_name: str = "package.json",
    platform: PlatformInfo | None = None,
) -> OperationResult:
    """Write the npm manifest; its license is replaced by amalgamation right after."""
    return _generate(
        target_dir / file_name,
        "package.json",
        "manifest_failed",
        platform=platform,
        name=name,
        license=license,
    )


def generate_gitignore(
    target_dir: Path, *, file_name: str = ".gitignore", platform: PlatformInfo | None = None
) -> OperationResult:
    return _generate(target_dir / file_name, ".gitignore", "gitignore_failed", platform=platform)


def generate_marker(
    target_dir: Path,
    source_license: str,
    doc_license: str,
    *,
    file_name: str = ".sr",
    platform: PlatformInfo | None = None,
) -> OperationResult:
    """Write the marker file that makes ``target_dir`` a component."""
    return _generate(
        target_dir / file_name,
        ".sr",
        "marker_failed",
        platform=platform,
        source_license=source_license,
        doc_license=doc_license,
    )
