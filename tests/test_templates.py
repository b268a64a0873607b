# test_templates.py
# SPDX-License-Identifier: MIT
import json

import pytest
import yaml

from sliderule.core.interfaces import STATUS
from sliderule.core.keyvalue import get_values
from sliderule.core.templates import (
    TemplateRenderError,
    generate_bom,
    generate_gitignore,
    generate_manifest,
    generate_marker,
    generate_readme,
    render_template,
)


def test_render_manifest_is_json_with_license(posix):
    text = render_template("package.json", platform=posix, name="blink", license="MIT")

    data = json.loads(text)
    assert data["name"] == "blink"
    assert data["license"] == "MIT"
    assert data["dependencies"] == {}


def test_render_bom_is_yaml(posix):
    data = yaml.safe_load(render_template("bom_data.yaml", platform=posix, name="blink"))

    assert data["order"] == ["component_1"]
    assert data["parts"]["component_1"]["quantity"] == 1


def test_render_uses_platform_newline(windows, posix):
    crlf = render_template("README.md", platform=windows, name="blink")
    lf = render_template("README.md", platform=posix, name="blink")

    assert crlf.startswith("# blink\r\n")
    assert "\n" not in crlf.replace("\r\n", "")
    assert crlf.replace("\r\n", "\n") == lf


def test_render_unknown_template(posix):
    with pytest.raises(TemplateRenderError):
        render_template("Makefile", platform=posix)


def test_render_missing_variable(posix):
    with pytest.raises(TemplateRenderError):
        render_template("package.json", platform=posix, name="blink")


def test_render_bom_rejects_broken_yaml(posix):
    with pytest.raises(TemplateRenderError):
        render_template("bom_data.yaml", platform=posix, name="x\n  : [")


def test_generate_marker_is_readable_by_keyvalue(tmp_path, posix):
    result = generate_marker(tmp_path, "MIT", "CC-BY-4.0", platform=posix)

    assert result.ok
    values = get_values(tmp_path / ".sr", ["source_license", "documentation_license"])
    assert values == {"source_license": "MIT", "documentation_license": "CC-BY-4.0"}


def test_generate_helpers_write_expected_files(tmp_path, posix):
    for result in (
        generate_readme(tmp_path, "blink", platform=posix),
        generate_bom(tmp_path, "blink", platform=posix),
        generate_manifest(tmp_path, "blink", "MIT", platform=posix),
        generate_gitignore(tmp_path, platform=posix),
    ):
        assert result.ok

    assert (tmp_path / "README.md").read_text().startswith("# blink\n")
    assert "node_modules/" in (tmp_path / ".gitignore").read_text()
    assert json.loads((tmp_path / "package.json").read_text())["name"] == "blink"
    assert (tmp_path / "bom_data.yaml").exists()


def test_generate_never_overwrites(tmp_path, posix):
    readme = tmp_path / "README.md"
    readme.write_text("my notes\n")

    result = generate_readme(tmp_path, "blink", platform=posix)

    assert result.ok
    assert readme.read_text() == "my notes\n"
    assert any("already exists" in line for line in result.stdout)


def test_generate_reports_write_failure(tmp_path, posix):
    result = generate_manifest(tmp_path / "missing-dir", "blink", "MIT", platform=posix)

    assert result.status == STATUS["manifest_failed"]
    assert result.stderr


def test_render_every_template_with_generator_context(posix):
    contexts = {
        "README.md": {"name": "blink"},
        "bom_data.yaml": {"name": "blink"},
        "package.json": {"name": "blink", "license": "MIT"},
        ".gitignore": {},
        ".sr": {"source_license": "MIT", "doc_license": "CC0-1.0"},
    }

    for template, context in contexts.items():
        assert render_template(template, platform=posix, **context)

    assert render_template("README.md", platform=posix, name="blink").startswith("# blink\n")
    assert "Bill of Materials Data for blink" in render_template("bom_data.yaml", platform=posix, name="blink")
