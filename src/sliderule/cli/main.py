# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..core.config import SlideruleConfig, load_config_from_path
from ..core.interfaces import OperationResult
from ..core.licenses import amalgamate_licenses
from .runner import (
    add_remote_component,
    change_licenses,
    component_diff,
    component_status,
    create_component,
    download_component,
    get_licenses,
    list_all_licenses,
    refactor,
    remove,
    update_dependencies,
    update_local_component,
    upload_component,
)


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level sliderule argument parser.

    Every subcommand acts on the component in ``--dir`` (the current
    directory by default).

    Returns:
        argparse.ArgumentParser: Configured argument parser for the CLI.
    """
    parser = argparse.ArgumentParser(prog="sliderule", description="Sliderule component manager")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g., DEBUG, INFO, WARNING). Overrides the config file.",
    )
    parser.add_argument("-c", "--config", help="Path to config file (TOML or JSON).")
    parser.add_argument("-d", "--dir", default=".", type=Path, help="Component directory to operate on.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_p = subparsers.add_parser("create", help="Create a new component.")
    create_p.add_argument("name", help="Component name.")
    create_p.add_argument("-s", "--source-license", help="SPDX id for source files.")
    create_p.add_argument("-l", "--doc-license", help="SPDX id for documentation.")

    upload_p = subparsers.add_parser("upload", help="Commit and push the component.")
    upload_p.add_argument("-m", "--message", required=True, help="Commit message.")
    upload_p.add_argument("-u", "--url", default="", help="Remote URL, used on the first upload.")

    refactor_p = subparsers.add_parser("refactor", help="Move a local component to a remote repository.")
    refactor_p.add_argument("name", help="Local component name.")
    refactor_p.add_argument("url", help="Remote repository URL.")

    remove_p = subparsers.add_parser("remove", help="Remove a local or remote component.")
    remove_p.add_argument("name", help="Component name.")

    add_p = subparsers.add_parser("add", help="Add a remote component.")
    add_p.add_argument("url", help="Remote component URL.")
    add_p.add_argument("--cache", help="npm cache directory.")

    download_p = subparsers.add_parser("download", help="Copy a remote component into this directory.")
    download_p.add_argument("url", help="Remote component URL.")

    update_p = subparsers.add_parser("update", help="Update remote components.")
    update_p.add_argument(
        "--local",
        action="store_true",
        help="Pull the component itself instead of its remote components.",
    )

    licenses_p = subparsers.add_parser("licenses", help="Inspect or change licenses.")
    licenses_sub = licenses_p.add_subparsers(dest="licenses_command", required=True)
    licenses_sub.add_parser("list", help="List every license in the hierarchy.")
    change_p = licenses_sub.add_parser("change", help="Change this component's licenses.")
    change_p.add_argument("-s", "--source-license", help="New source license; unchanged when omitted.")
    change_p.add_argument("-l", "--doc-license", help="New documentation license; unchanged when omitted.")
    licenses_sub.add_parser("amalgamate", help="Recompute the manifest license expression.")

    subparsers.add_parser("status", help="Show changed files.")
    subparsers.add_parser("diff", help="Show line-level changes.")

    return parser


def _load_config(args: argparse.Namespace) -> SlideruleConfig:
    cfg = load_config_from_path(args.config) if args.config else SlideruleConfig()
    cfg.validate()
    if args.log_level:
        cfg.logging.level = args.log_level
    cfg.logging.apply()
    return cfg


def _report(result: OperationResult) -> int:
    """Print a result's messages and turn it into an exit code."""
    for line in result.stdout:
        print(line)
    for line in result.stderr:
        print(line, file=sys.stderr)
    return 0 if result.ok else 1


def _cmd_licenses(args: argparse.Namespace, cfg: SlideruleConfig) -> int:
    target: Path = args.dir
    sub = args.licenses_command
    if sub == "list":
        sys.stdout.write(list_all_licenses(target, config=cfg, platform=cfg.platform))
        return 0
    if sub == "amalgamate":
        print(amalgamate_licenses(target, config=cfg))
        return 0
    source, doc = get_licenses(target, config=cfg)
    return _report(
        change_licenses(
            target,
            args.source_license or source,
            args.doc_license or doc,
            config=cfg,
        )
    )


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch a parsed CLI command to the matching component operation.

    Args:
        args (argparse.Namespace): Parsed arguments from the top-level
            argument parser.

    Returns:
        int: Process exit code, 0 on success and 1 on any failure.
    """
    cfg = _load_config(args)
    target: Path = args.dir
    cmd = args.command

    if cmd == "create":
        return _report(create_component(target, args.name, args.source_license, args.doc_license, config=cfg))
    if cmd == "upload":
        return _report(upload_component(target, args.message, args.url, config=cfg))
    if cmd == "refactor":
        return _report(refactor(target, args.name, args.url, config=cfg))
    if cmd == "remove":
        return _report(remove(target, args.name, config=cfg))
    if cmd == "add":
        return _report(add_remote_component(target, args.url, args.cache, config=cfg))
    if cmd == "download":
        return _report(download_component(target, args.url, config=cfg))
    if cmd == "update":
        if args.local:
            return _report(update_local_component(target, config=cfg))
        return _report(update_dependencies(target, config=cfg))
    if cmd == "licenses":
        return _cmd_licenses(args, cfg)
    if cmd == "status":
        return _report(component_status(target, config=cfg))
    if cmd == "diff":
        return _report(component_diff(target, config=cfg))

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the sliderule command-line interface.

    Args:
        argv (Sequence[str] | None): Optional list of argument strings to
            parse instead of ``sys.argv[1:]``. Primarily useful for tests.

    Returns:
        int: Process exit code, where 0 indicates success and non-zero
        values indicate failure.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
