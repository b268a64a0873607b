# runner.py
# SPDX-License-Identifier: MIT
"""Component operations behind the ``sliderule`` command.

Each operation works on a target directory, drives the filesystem and the
git/npm clients, re-amalgamates licenses where the hierarchy may have
changed, and reports through an :class:`OperationResult`. Filesystem and
tool failures are turned into status codes here; only programming errors
propagate.
"""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

from ..clients.git import (
    git_add_and_commit,
    git_clone,
    git_diff,
    git_init,
    git_pull,
    git_set_remote_url,
    git_status,
)
from ..clients.npm import npm_install, npm_uninstall
from ..core.config import SlideruleConfig
from ..core.hierarchy import DirectoryAccessError, is_component
from ..core.interfaces import STATUS, OperationResult
from ..core.keyvalue import FileReadError, FileWriteError, update_value
from ..core.licenses import (
    DOC_LICENSE_KEY,
    SOURCE_LICENSE_KEY,
    amalgamate_licenses,
    get_licenses,
    is_known_license_id,
    list_all_licenses,
)
from ..core.log import get_logger
from ..core.naming import ComponentNameError, component_name_from_url, validate_component_name
from ..core.templates import (
    generate_bom,
    generate_gitignore,
    generate_manifest,
    generate_marker,
    generate_readme,
)

log = get_logger(__name__)

__all__ = [
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
    "list_all_licenses",
    "get_licenses",
]

_SCAFFOLD_STATUS = {
    "components": "components_dir_failed",
    "dist": "dist_dir_failed",
    "docs": "docs_dir_failed",
    "source": "source_dir_failed",
}


def _config(config: SlideruleConfig | None) -> SlideruleConfig:
    return config if config is not None else SlideruleConfig()


def _amalgamate(target_dir: Path, cfg: SlideruleConfig) -> OperationResult:
    """Refresh the manifest license of ``target_dir``, reporting failures as status 2."""
    result = OperationResult()
    try:
        expression = amalgamate_licenses(target_dir, config=cfg)
    except (DirectoryAccessError, FileNotFoundError, FileReadError, FileWriteError) as exc:
        return result.fail(
            STATUS["amalgamation_failed"],
            f"ERROR: license manifest could not be updated: {exc}",
        )
    log.debug("Licenses for %s amalgamated to %s", target_dir, expression)
    return result


def _warn_unknown_licenses(*license_ids: str) -> None:
    for license_id in license_ids:
        if license_id and not is_known_license_id(license_id):
            log.warning("%s is not a known SPDX license identifier", license_id)


def create_component(
    target_dir: str | Path,
    name: str,
    source_license: str | None = None,
    doc_license: str | None = None,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Create a new component called ``name``.

    Inside an existing component the new one goes in its ``components``
    directory and counts toward the parent's licenses; anywhere else it is
    created directly under ``target_dir`` as a top-level component.

    Existing directories and files are reused rather than overwritten, so
    running this on a half-built component fills in what is missing.

    Args:
        target_dir (str | Path): Directory the command was run from.
        name (str): Component name, used as its directory name.
        source_license (str | None): SPDX id for source files; the
            configured default when omitted.
        doc_license (str | None): SPDX id for documentation; the configured
            default when omitted.
        config (SlideruleConfig | None): Layout and tool settings.

    Returns:
        OperationResult: Status 11-20 when a directory or file could not be
        created, 2 when amalgamation failed.
    """
    cfg = _config(config)
    comp = cfg.component
    result = OperationResult()
    try:
        name = validate_component_name(name)
    except ComponentNameError as exc:
        return result.fail(STATUS["invalid_name"], f"ERROR: {exc}")

    source_license = source_license or comp.default_source_license
    doc_license = doc_license or comp.default_doc_license
    _warn_unknown_licenses(source_license, doc_license)

    parent_dir = Path(target_dir)
    nested = is_component(parent_dir, marker_name=comp.marker_file)
    component_dir = parent_dir / comp.components_dir / name if nested else parent_dir / name

    if component_dir.exists():
        result.info(f"{name} directory already exists, using existing directory.")
    else:
        try:
            component_dir.mkdir(parents=True)
        except OSError as exc:
            return result.fail(
                STATUS["component_dir_failed"],
                f"ERROR: Could not create component directory: {exc}",
            )

    for dir_name in comp.scaffold_dirs:
        sub_dir = component_dir / dir_name
        if sub_dir.exists():
            result.info(f"{dir_name} directory already exists, using existing directory.")
            continue
        try:
            sub_dir.mkdir()
        except OSError as exc:
            status = STATUS[_SCAFFOLD_STATUS.get(dir_name, "component_dir_failed")]
            result.fail(status, f"ERROR: Could not create {dir_name} directory: {exc}")

    platform = cfg.platform
    result.merge(generate_readme(component_dir, name, file_name=comp.readme_file, platform=platform))
    result.merge(generate_bom(component_dir, name, file_name=comp.bom_file, platform=platform))
    result.merge(
        generate_manifest(
            component_dir, name, source_license, file_name=comp.manifest_file, platform=platform
        )
    )
    result.merge(
        generate_marker(
            component_dir, source_license, doc_license, file_name=comp.marker_file, platform=platform
        )
    )

    result.merge(_amalgamate(component_dir, cfg))
    if nested:
        result.merge(_amalgamate(parent_dir, cfg))
    log.info("Created component %s at %s", name, component_dir)
    return result.info("Finished setting up component.")


def upload_component(
    target_dir: str | Path,
    message: str,
    url: str,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Commit everything in ``target_dir`` and push it to ``url``.

    The repository and its remote are set up on the first upload. Later
    uploads repoint the remote at ``url`` when one is given and otherwise
    push to whatever remote is already configured.
    """
    cfg = _config(config)
    tools = cfg.tools
    target = Path(target_dir)
    result = _amalgamate(target, cfg)

    if not (target / ".git").exists():
        result.merge(git_init(target, url, git=tools.git_executable, remote=tools.remote_name))
    elif url:
        result.merge(git_set_remote_url(target, url, git=tools.git_executable, remote=tools.remote_name))

    if not (target / cfg.component.gitignore_file).exists():
        result.merge(
            generate_gitignore(target, file_name=cfg.component.gitignore_file, platform=cfg.platform)
        )

    result.merge(
        git_add_and_commit(
            target,
            message,
            git=tools.git_executable,
            remote=tools.remote_name,
            branch=tools.branch,
            platform=cfg.platform,
        )
    )
    return result.info("Done uploading component.")


def refactor(
    target_dir: str | Path,
    name: str,
    url: str,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Turn the local component ``name`` into a remote one hosted at ``url``.

    Uploads the component, deletes the local copy and installs it back as
    an npm dependency of ``target_dir``.
    """
    try:
        name = validate_component_name(name)
    except ComponentNameError as exc:
        return OperationResult().fail(STATUS["invalid_name"], f"ERROR: {exc}")

    cfg = _config(config)
    target = Path(target_dir)
    component_dir = target / cfg.component.components_dir / name
    result = OperationResult()
    if not component_dir.is_dir():
        return result.fail(
            STATUS["component_missing"],
            "ERROR: The component does not exist in the components directory.",
        )

    result.merge(
        upload_component(component_dir, "Initial commit, refactoring component", url, config=cfg)
    )
    if not result.ok:
        return result.fail(
            STATUS["git_push_failed"],
            "ERROR: Upload failed, keeping the local component.",
        )
    result.merge(remove(target, name, config=cfg))
    result.merge(add_remote_component(target, url, config=cfg))
    result.merge(_amalgamate(target, cfg))
    return result.info("Finished refactoring local component to remote repository.")


def _clear_read_only(component_dir: Path) -> OperationResult:
    """Make every entry under ``component_dir`` writable so it can be deleted.

    git marks its object files read-only, which stops deletion on Windows.
    """
    result = OperationResult()
    errors: list[OSError] = []
    paths = [component_dir]
    for dirpath, dirnames, filenames in os.walk(component_dir, onerror=errors.append):
        base = Path(dirpath)
        paths.extend(base / n for n in dirnames)
        paths.extend(base / n for n in filenames)
    if errors:
        return result.fail(
            STATUS["walk_failed"],
            f"ERROR: Could not handle entry while walking components directory tree: {errors[0]}",
        )

    for path in paths:
        try:
            mode = path.lstat().st_mode
        except OSError as exc:
            return result.fail(STATUS["metadata_failed"], f"ERROR: Could not get metadata for {path}: {exc}")
        if stat.S_ISLNK(mode):
            continue
        try:
            os.chmod(path, mode | stat.S_IWUSR)
        except OSError as exc:
            return result.fail(STATUS["permissions_failed"], f"ERROR: Failed to set permissions on {path}: {exc}")
    return result


def remove(
    target_dir: str | Path,
    name: str,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Remove component ``name`` from ``target_dir``.

    A local component is deleted from the components directory; anything
    else is assumed to be a remote component and uninstalled through npm.
    """
    try:
        name = validate_component_name(name)
    except ComponentNameError as exc:
        return OperationResult().fail(STATUS["invalid_name"], f"ERROR: {exc}")

    cfg = _config(config)
    target = Path(target_dir)
    component_dir = target / cfg.component.components_dir / name

    if component_dir.exists():
        result = OperationResult().info(f"Deleting component directory {name}.")
        result.merge(_clear_read_only(component_dir))
        if not result.ok:
            return result
        try:
            shutil.rmtree(component_dir)
        except OSError as exc:
            return result.fail(STATUS["delete_failed"], f"ERROR: not able to delete component directory: {exc}")
    else:
        result = remove_remote_component(target, name, config=cfg)

    result.merge(_amalgamate(target, cfg))
    if result.ok:
        result.info(f"Component {name} was successfully removed.")
    return result


def change_licenses(
    target_dir: str | Path,
    source_license: str,
    doc_license: str,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Set the source and documentation licenses of the component in ``target_dir``."""
    cfg = _config(config)
    target = Path(target_dir)
    marker = target / cfg.component.marker_file
    result = OperationResult()
    _warn_unknown_licenses(source_license, doc_license)

    for key, value in ((SOURCE_LICENSE_KEY, source_license), (DOC_LICENSE_KEY, doc_license)):
        try:
            updated = update_value(marker, key, value)
        except FileNotFoundError:
            return result.fail(
                STATUS["marker_missing"],
                f"ERROR: {marker} does not exist, is this a component directory?",
            )
        except FileReadError as exc:
            return result.fail(STATUS["marker_read_failed"], f"ERROR: {exc}")
        except FileWriteError as exc:
            return result.fail(STATUS["marker_write_failed"], f"ERROR: {exc}")
        if not updated:
            result.fail(STATUS["marker_write_failed"], f"ERROR: {marker} has no {key} entry to update.")

    result.merge(_amalgamate(target, cfg))
    if result.ok:
        result.info(f"Licenses changed to {source_license} (source) and {doc_license} (documentation).")
    return result


def add_remote_component(
    target_dir: str | Path,
    url: str,
    cache: str | None = None,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Install the component at ``url`` as an npm dependency of ``target_dir``."""
    cfg = _config(config)
    target = Path(target_dir)
    result = npm_install(target, url, npm=cfg.npm_executable, cache=cache or cfg.tools.npm_cache)
    result.merge(_amalgamate(target, cfg))
    if result.ok:
        return result.info("Remote component was added successfully.")
    return result.fail(STATUS["npm_failed"], "ERROR: Remote component was not successfully added")


def remove_remote_component(
    target_dir: str | Path,
    name: str,
    cache: str | None = None,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Uninstall the remote component ``name`` through npm."""
    try:
        name = validate_component_name(name)
    except ComponentNameError as exc:
        return OperationResult().fail(STATUS["invalid_name"], f"ERROR: {exc}")
    cfg = _config(config)
    result = npm_uninstall(Path(target_dir), name, npm=cfg.npm_executable, cache=cache or cfg.tools.npm_cache)
    if result.ok:
        return result.info("Component was removed successfully.")
    return result.fail(STATUS["npm_failed"], "ERROR: Component was not successfully removed")


def download_component(
    target_dir: str | Path,
    url: str,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Clone the component at ``url`` into a new directory under ``target_dir``."""
    cfg = _config(config)
    target = Path(target_dir)
    try:
        name = component_name_from_url(url)
    except ComponentNameError:
        name = ""
    if name and (target / name).exists():
        return OperationResult().fail(
            STATUS["git_clone_failed"],
            f"ERROR: {target / name} already exists, refusing to download over it.",
        )

    result = git_clone(target, url, git=cfg.tools.git_executable)
    if result.ok:
        return result.info("Component was downloaded successfully.")
    return result.fail(STATUS["git_clone_failed"], "ERROR: Component was not successfully downloaded")


def update_dependencies(
    target_dir: str | Path,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Install or refresh every remote component listed in the manifest."""
    cfg = _config(config)
    target = Path(target_dir)
    result = npm_install(target, npm=cfg.npm_executable, cache=cfg.tools.npm_cache)
    if result.ok:
        result.info("Dependencies were updated successfully.")
    else:
        result.fail(STATUS["npm_failed"], "ERROR: Dependencies were not successfully updated")
    return result.merge(_amalgamate(target, cfg))


def update_local_component(
    target_dir: str | Path,
    *,
    config: SlideruleConfig | None = None,
) -> OperationResult:
    """Pull the latest changes for the component in ``target_dir``."""
    cfg = _config(config)
    tools = cfg.tools
    target = Path(target_dir)
    if not (target / ".git").exists():
        return OperationResult().fail(
            STATUS["not_a_repository"],
            "ERROR: Component is not set up as a repository, cannot update it.",
        )

    result = git_pull(target, git=tools.git_executable, remote=tools.remote_name, branch=tools.branch)
    result.merge(_amalgamate(target, cfg))
    if result.status == 0:
        return result.info("Component updated successfully.")
    return result.info("Component not updated successfully.")


def component_status(target_dir: str | Path, *, config: SlideruleConfig | None = None) -> OperationResult:
    cfg = _config(config)
    return git_status(Path(target_dir), git=cfg.tools.git_executable)


def component_diff(target_dir: str | Path, *, config: SlideruleConfig | None = None) -> OperationResult:
    cfg = _config(config)
    return git_diff(Path(target_dir), git=cfg.tools.git_executable)
