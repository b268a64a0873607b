# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`sliderule`.

Public surface
--------------
The symbols listed in :data:`PRIMARY_API` are the recommended entry points.
Most callers:

- Build a configuration via :class:`SlideruleConfig` or load one from
  TOML/JSON with :func:`load_config_from_path`.
- Call a component operation such as :func:`create_component` or
  :func:`remove`, each of which returns an :class:`OperationResult`.
- Call :func:`amalgamate_licenses` directly when only the manifest license
  needs refreshing.

Anything imported here but not listed in :data:`PRIMARY_API` is an expert
surface and may change between releases.

Examples:
    Create a top-level component and list its licenses::

        >>> from sliderule import create_component, list_all_licenses
        >>> result = create_component("projects", "blink", "MIT", "CC-BY-4.0")
        >>> result.ok
        True
        >>> print(list_all_licenses("projects/blink"))
"""


from __future__ import annotations

# ---------------------------------------------------------------------------
# Package version
# ---------------------------------------------------------------------------
try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("sliderule")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"


# ---------------------------------------------------------------------------
# Primary public API (stable; exported via __all__)
# ---------------------------------------------------------------------------
from .cli.runner import (
    add_remote_component,
    change_licenses,
    component_diff,
    component_status,
    create_component,
    download_component,
    refactor,
    remove,
    remove_remote_component,
    update_dependencies,
    update_local_component,
    upload_component,
)

# ---------------------------------------------------------------------------
# Advanced / expert API (imported for convenience; not exported via __all__)
# ---------------------------------------------------------------------------
from .core.config import SlideruleConfig, load_config_from_path
from .core.hierarchy import DirectoryAccessError, find_markers, get_level, is_component, iter_markers
from .core.interfaces import STATUS, OperationResult
from .core.keyvalue import FileReadError, FileWriteError, get_value, get_values, update_value
from .core.licenses import (
    amalgamate_licenses,
    build_license_expression,
    get_licenses,
    is_valid_license_expression,
    list_all_licenses,
)
from .core.log import configure_logging, get_logger
from .core.platform import PlatformInfo

# ---------------------------------------------------------------------------
# Stable export list
# ---------------------------------------------------------------------------
PRIMARY_API = [
    "__version__",
    "SlideruleConfig",
    "load_config_from_path",
    "OperationResult",
    "STATUS",
    "create_component",
    "upload_component",
    "refactor",
    "remove",
    "change_licenses",
    "add_remote_component",
    "remove_remote_component",
    "download_component",
    "update_dependencies",
    "update_local_component",
    "component_status",
    "component_diff",
    "amalgamate_licenses",
    "list_all_licenses",
    "get_licenses",
    "find_markers",
    "get_values",
    "update_value",
]

__all__ = list(PRIMARY_API)
