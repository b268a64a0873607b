# test_config.py
# SPDX-License-Identifier: MIT
import json

import pytest

from sliderule.core.config import (
    ComponentConfig,
    SlideruleConfig,
    ToolsConfig,
    load_config_from_path,
)
from sliderule.core.platform import WINDOWS_NPM_EXECUTABLE, PlatformInfo


def test_defaults_match_component_layout():
    cfg = SlideruleConfig(platform=PlatformInfo.for_os("Linux"))

    assert cfg.component.marker_file == ".sr"
    assert cfg.component.manifest_file == "package.json"
    assert cfg.component.scaffold_dirs == ("components", "dist", "docs", "source")
    assert cfg.component.max_depth == 100
    assert cfg.tools.branch == "master"
    cfg.validate()


def test_to_dict_skips_platform_and_none():
    data = SlideruleConfig(platform=PlatformInfo.for_os("Windows")).to_dict()

    assert "platform" not in data
    assert "npm_executable" not in data["tools"]
    assert data["component"]["scaffold_dirs"] == ["components", "dist", "docs", "source"]


def test_json_round_trip(tmp_path):
    cfg = SlideruleConfig(platform=PlatformInfo.for_os("Linux"))
    cfg.component.strict_walk = True
    cfg.tools.npm_cache = str(tmp_path / "cache")
    path = tmp_path / "sliderule.json"

    cfg.to_json(path)
    loaded = load_config_from_path(path)

    assert loaded.component == cfg.component
    assert loaded.tools == cfg.tools
    assert json.loads(path.read_text())["component"]["strict_walk"] is True


def test_load_toml(tmp_path):
    path = tmp_path / "sliderule.toml"
    path.write_text(
        "[component]\n"
        'marker_file = ".component"\n'
        'scaffold_dirs = ["components", "docs"]\n'
        "max_depth = 5\n"
        "\n"
        "[tools]\n"
        'git_executable = "/usr/local/bin/git"\n'
        'branch = "main"\n'
        "\n"
        "[logging]\n"
        'level = "DEBUG"\n',
        encoding="utf-8",
    )

    cfg = load_config_from_path(path)

    assert cfg.component.marker_file == ".component"
    assert cfg.component.scaffold_dirs == ("components", "docs")
    assert cfg.component.max_depth == 5
    assert cfg.tools.git_executable == "/usr/local/bin/git"
    assert cfg.tools.branch == "main"
    assert cfg.logging.level == "DEBUG"


def test_unknown_keys_are_ignored():
    cfg = SlideruleConfig.from_dict({"component": {"marker_file": ".x", "bogus": 1}, "extra": {}})

    assert cfg.component.marker_file == ".x"


def test_unsupported_extension(tmp_path):
    path = tmp_path / "sliderule.yaml"
    path.write_text("component: {}\n")

    with pytest.raises(ValueError):
        load_config_from_path(path)


@pytest.mark.parametrize(
    "component",
    [
        ComponentConfig(marker_file=""),
        ComponentConfig(manifest_file=" "),
        ComponentConfig(marker_file="package.json"),
        ComponentConfig(max_depth=0),
    ],
)
def test_validate_rejects_broken_layouts(component):
    cfg = SlideruleConfig(component=component, platform=PlatformInfo.for_os("Linux"))

    with pytest.raises(ValueError):
        cfg.validate()


def test_npm_executable_follows_platform_unless_configured():
    windows = PlatformInfo.for_os("Windows")
    assert SlideruleConfig(platform=windows).npm_executable == WINDOWS_NPM_EXECUTABLE
    assert SlideruleConfig(platform=PlatformInfo.for_os("Linux")).npm_executable == "npm"

    cfg = SlideruleConfig(tools=ToolsConfig(npm_executable="pnpm"), platform=windows)
    assert cfg.npm_executable == "pnpm"


def test_platform_descriptors():
    windows = PlatformInfo.for_os("Windows")
    linux = PlatformInfo.for_os("Linux")

    assert windows.is_windows and windows.newline == "\r\n"
    assert not linux.is_windows and linux.newline == "\n"
    assert isinstance(PlatformInfo.detect(), PlatformInfo)
