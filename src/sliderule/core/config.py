# config.py
# SPDX-License-Identifier: MIT
"""Configuration models and helpers for sliderule.

Declarative dataclasses describe the component layout (marker, manifest
and scaffold names), the external tools sliderule drives, and logging.
Configurations round-trip through plain dicts and load from JSON or TOML.
"""
from __future__ import annotations

import json
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except Exception:  # pragma: no cover
        tomllib = None  # type: ignore[assignment]
from collections.abc import Sequence as ABCSequence
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .log import PACKAGE_LOGGER_NAME, configure_logging
from .platform import PlatformInfo

__all__ = [
    "ComponentConfig",
    "ToolsConfig",
    "LoggingConfig",
    "SlideruleConfig",
    "load_config_from_path",
]


@dataclass(slots=True)
class ComponentConfig:
    """Names and limits that define a component on disk.

    Attributes:
        marker_file (str): File whose presence makes a directory a
            component; holds the source and documentation licenses.
        manifest_file (str): npm manifest whose ``license`` line receives
            the amalgamated expression.
        readme_file (str): Generated README name.
        bom_file (str): Generated bill-of-materials name.
        gitignore_file (str): Ignore file written before the first upload.
        components_dir (str): Directory that holds local sub-components.
        scaffold_dirs (tuple[str, ...]): Directories created for a new
            component.
        default_source_license (str): Source license when none is given.
        default_doc_license (str): Documentation license when none is given.
        max_depth (int): Deepest level searched for marker files.
        strict_walk (bool): Abort a hierarchy walk on the first unreadable
            subdirectory instead of skipping it.
    """
    marker_file: str = ".sr"
    manifest_file: str = "package.json"
    readme_file: str = "README.md"
    bom_file: str = "bom_data.yaml"
    gitignore_file: str = ".gitignore"
    components_dir: str = "components"
    scaffold_dirs: Tuple[str, ...] = ("components", "dist", "docs", "source")
    default_source_license: str = "Unlicense"
    default_doc_license: str = "CC0-1.0"
    max_depth: int = 100
    strict_walk: bool = False


@dataclass(slots=True)
class ToolsConfig:
    """External command settings.

    Attributes:
        git_executable (str): Command used to run git.
        npm_executable (str | None): Command used to run npm; None picks
            the platform default.
        remote_name (str): Remote that uploads push to and updates pull from.
        branch (str): Branch that uploads push to and updates pull from.
        npm_cache (str | None): Cache directory handed to npm.
    """
    git_executable: str = "git"
    npm_executable: Optional[str] = None
    remote_name: str = "origin"
    branch: str = "master"
    npm_cache: Optional[str] = None

    def resolve_npm(self, platform: PlatformInfo) -> str:
        return self.npm_executable or platform.npm_executable


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger; set propagate/logger_name to
    integrate with host apps.
    """
    level: Union[int, str] = "INFO"
    propagate: bool = False
    fmt: Optional[str] = "%(levelname)s %(name)s: %(message)s"
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


T = TypeVar("T")


@dataclass(slots=True)
class SlideruleConfig:
    """Everything sliderule operations need besides their arguments.

    ``platform`` describes the host (line endings, npm location). It is
    detected when the config is built and is never serialized; tests pass
    an explicit :class:`PlatformInfo` instead.
    """
    component: ComponentConfig = field(default_factory=ComponentConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    platform: PlatformInfo = field(default_factory=PlatformInfo.detect)

    def validate(self) -> None:
        """Reject layouts that cannot work.

        Raises:
            ValueError: On empty file names, a non-positive ``max_depth``,
                or a marker that shares the manifest's name.
        """
        comp = self.component
        for name in ("marker_file", "manifest_file", "components_dir"):
            value = getattr(comp, name)
            if not value or not str(value).strip():
                raise ValueError(f"component.{name} must be a non-empty file name.")
        if comp.marker_file == comp.manifest_file:
            raise ValueError("component.marker_file and component.manifest_file must differ.")
        if comp.max_depth < 1:
            raise ValueError(f"component.max_depth must be at least 1; got {comp.max_depth}.")
        if not self.tools.git_executable:
            raise ValueError("tools.git_executable must be set.")

    @property
    def npm_executable(self) -> str:
        return self.tools.resolve_npm(self.platform)

    # -------------------------
    # Serialization helpers
    # -------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation, without ``platform``."""
        return _dataclass_to_dict(self)

    def to_json(self, path: Path | str, *, indent: int = 2) -> str:
        """Write the configuration as JSON and return the path written."""
        target = Path(path)
        target.write_text(json.dumps(self.to_dict(), indent=indent, sort_keys=True), encoding="utf-8")
        return str(target)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        """Instantiate a SlideruleConfig from a mapping."""
        return _dataclass_from_dict(cls, data)

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload)

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """
        Load a SlideruleConfig from a TOML file.

        Top-level tables mirror the dataclass: [component], [tools],
        [logging].
        """
        if tomllib is None:
            raise RuntimeError(
                "TOML support requires Python 3.11+ (tomllib) or installing the 'tomli' package."
            )
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        if not isinstance(data, Mapping):
            raise TypeError(f"Top-level TOML document must be a mapping; got {type(data).__name__}.")
        return cls.from_dict(data)


def load_config_from_path(path: str | Path) -> SlideruleConfig:
    """Load a SlideruleConfig from a ``.toml`` or ``.json`` file.

    Raises:
        ValueError: If the file extension is not ``.toml`` or ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        return SlideruleConfig.from_toml(p)
    if suffix == ".json":
        return SlideruleConfig.from_json(p)
    raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")


_SKIP_FIELDS: Dict[Type[Any], set[str]] = {
    SlideruleConfig: {"platform"},
}


def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize dataclasses to JSON-friendly dicts, skipping None and runtime-only fields."""
    result: Dict[str, Any] = {}
    skip = _SKIP_FIELDS.get(type(obj), set())
    for f in fields(obj):
        if f.name in skip:
            continue
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _serialize_value(value)
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if is_dataclass(value):
        return _dataclass_to_dict(value)
    return value


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate dataclass ``cls`` from a mapping, ignoring unknown keys."""
    if data is None:
        return cls()  # type: ignore[call-arg]
    type_hints = get_type_hints(cls)
    skip = _SKIP_FIELDS.get(cls, set())  # type: ignore[arg-type]
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):  # type: ignore[arg-type]
        if f.name in skip or f.name not in data:
            continue
        kwargs[f.name] = _coerce_value(type_hints.get(f.name, f.type), data[f.name])
    return cls(**kwargs)  # type: ignore[arg-type]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    """Coerce ``value`` into the shape implied by ``expected_type``."""
    base_type = _strip_optional(expected_type)
    if value is None:
        return None
    if isinstance(base_type, type) and is_dataclass(base_type):
        return _dataclass_from_dict(base_type, value)
    origin = get_origin(base_type)
    if origin in (list, tuple, ABCSequence):
        args = [a for a in get_args(base_type) if a is not Ellipsis]
        inner = args[0] if args else Any
        items = [_coerce_value(inner, v) for v in value]
        return tuple(items) if origin is tuple else items
    if base_type in {str, int, float, bool}:
        return base_type(value)
    return value


def _strip_optional(typ: Any) -> Any:
    if get_origin(typ) is Union:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            return _strip_optional(args[0])
    return typ
