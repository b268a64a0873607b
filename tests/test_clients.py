# test_clients.py
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

import sliderule.clients.process as process
from sliderule.clients.git import (
    git_add_and_commit,
    git_clone,
    git_diff,
    git_init,
    git_pull,
    git_set_remote_url,
    git_status,
)
from sliderule.clients.npm import npm_install, npm_uninstall
from sliderule.core.interfaces import STATUS


@dataclass(frozen=True)
class _Proc:
    returncode: int
    stdout: str = ""
    stderr: str = ""


class _Recorder:
    """Stands in for subprocess.run and remembers every argv."""

    def __init__(self, *procs: _Proc) -> None:
        self.calls: list[tuple[list[str], dict[str, Any]]] = []
        self._procs = list(procs)

    def __call__(self, argv: list[str], **kwargs: Any) -> _Proc:
        self.calls.append((list(argv), kwargs))
        if self._procs:
            return self._procs.pop(0)
        return _Proc(returncode=0, stdout="ok\n")

    @property
    def argvs(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]


@pytest.fixture
def fake_run(monkeypatch):
    def install(*procs: _Proc) -> _Recorder:
        recorder = _Recorder(*procs)
        monkeypatch.setattr(process.subprocess, "run", recorder)
        return recorder

    return install


def _missing(_argv: list[str], **_kwargs: Any) -> _Proc:
    raise FileNotFoundError(2, "No such file or directory")


def test_git_init_sets_remote(tmp_path: Path, fake_run) -> None:
    recorder = fake_run()

    result = git_init(tmp_path, "https://example.com/blink.git")

    assert result.ok
    assert recorder.argvs == [
        ["git", "init"],
        ["git", "remote", "add", "origin", "https://example.com/blink.git"],
    ]
    _, kwargs = recorder.calls[0]
    assert kwargs["cwd"] == str(tmp_path)
    assert kwargs["capture_output"] is True and kwargs["text"] is True


def test_git_missing_executable(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(process.subprocess, "run", _missing)

    result = git_init(tmp_path, "https://example.com/blink.git")

    assert result.status == STATUS["git_not_found"]
    assert "please install" in result.stderr[0]


def test_git_start_failure_maps_to_step_status(tmp_path: Path, monkeypatch) -> None:
    def denied(_argv: list[str], **_kwargs: Any) -> _Proc:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(process.subprocess, "run", denied)

    assert git_clone(tmp_path, "https://example.com/x.git").status == STATUS["git_clone_failed"]
    assert git_status(tmp_path).status == STATUS["git_status_failed"]
    assert git_diff(tmp_path).status == STATUS["git_diff_failed"]


def test_git_add_and_commit_on_posix(tmp_path: Path, fake_run, posix) -> None:
    recorder = fake_run()

    result = git_add_and_commit(tmp_path, "Initial commit", platform=posix)

    assert result.ok
    assert recorder.argvs == [
        ["git", "add", "."],
        ["git", "commit", "-m", "Initial commit"],
        ["git", "push", "origin", "master"],
    ]
    assert "Changes pushed using git." in result.stdout


def test_git_add_and_commit_disables_sideband_on_windows(tmp_path: Path, fake_run, windows) -> None:
    recorder = fake_run()

    git_add_and_commit(tmp_path, "msg", platform=windows, remote="upstream", branch="main")

    assert ["git", "config", "--local", "sendpack.sideband", "false"] in recorder.argvs
    assert recorder.argvs[-1] == ["git", "push", "upstream", "main"]


def test_git_nonzero_exit_is_wrapped(tmp_path: Path, fake_run, posix) -> None:
    fake_run(
        _Proc(returncode=0),
        _Proc(returncode=1, stdout="nothing to commit, working tree clean\n"),
        _Proc(returncode=128, stderr="fatal: could not read from remote\n"),
    )

    result = git_add_and_commit(tmp_path, "msg", platform=posix)

    assert result.status == 0
    assert result.wrapped_status == 1
    assert not result.ok
    assert "fatal: could not read from remote" in result.stderr
    assert "Changes pushed using git." not in result.stdout


def test_git_pull_empty_stdout_is_reported(tmp_path: Path, fake_run) -> None:
    fake_run(_Proc(returncode=0, stdout=""))

    result = git_pull(tmp_path)

    assert result.status == STATUS["git_pull_stalled"]


def test_git_pull_success(tmp_path: Path, fake_run) -> None:
    recorder = fake_run(_Proc(returncode=0, stdout="Already up to date.\n"))

    result = git_pull(tmp_path, git="/opt/git", branch="main")

    assert result.ok
    assert result.stdout == ["Already up to date."]
    assert recorder.argvs == [["/opt/git", "pull", "origin", "main"]]


def test_git_clone_set_url_and_diff_argv(tmp_path: Path, fake_run) -> None:
    recorder = fake_run()

    git_clone(tmp_path, "https://example.com/x.git")
    git_set_remote_url(tmp_path, "https://example.com/y.git")
    git_diff(tmp_path)

    assert recorder.argvs == [
        ["git", "clone", "--recursive", "https://example.com/x.git"],
        ["git", "remote", "set-url", "origin", "https://example.com/y.git"],
        ["git", "--no-pager", "diff"],
    ]


def test_npm_install_argv(tmp_path: Path, fake_run) -> None:
    recorder = fake_run()

    npm_install(tmp_path)
    npm_install(tmp_path, "https://example.com/led.git", npm="npm.cmd", cache="/tmp/npm-cache")

    assert recorder.argvs == [
        ["npm", "install"],
        ["npm.cmd", "install", "--save", "https://example.com/led.git", "--cache", "/tmp/npm-cache"],
    ]


def test_npm_uninstall(tmp_path: Path, fake_run) -> None:
    recorder = fake_run()

    result = npm_uninstall(tmp_path, "led")

    assert result.ok
    assert recorder.argvs == [["npm", "uninstall", "--save", "led"]]


def test_npm_missing_executable(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(process.subprocess, "run", _missing)

    result = npm_install(tmp_path, "https://example.com/led.git")

    assert result.status == STATUS["npm_not_found"]


def test_npm_failure_is_wrapped(tmp_path: Path, fake_run) -> None:
    fake_run(_Proc(returncode=1, stderr="npm ERR! 404\n"))

    result = npm_uninstall(tmp_path, "led")

    assert result.status == 0
    assert result.wrapped_status == 1
    assert result.stderr == ["npm ERR! 404"]
