"""Discovery of sibling modules through the parent descriptor and sidecars.

The project root's ``pom.xml`` lists its module directories; each listed
directory may hold a sidecar naming the module types generated into it.
Module references are always resolved by directory name plus sidecar lookup,
never by absolute path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mvnscaffold.errors import ConflictError
from mvnscaffold.pom.reader import list_modules, read_descriptor

from .editor import FileEditor
from .sidecar import PROJECT_TYPE, Sidecar

logger = logging.getLogger(__name__)


def find_project_root(editor: FileEditor, destination: str | Path) -> Path:
    """Return *destination* if it is the project root, else its parent."""
    destination = Path(destination)
    if Sidecar(editor, destination).get(PROJECT_TYPE) is not None:
        return destination
    return destination.parent


def list_parent_modules(editor: FileEditor, root: str | Path) -> list[str]:
    """Module directories declared by the descriptor in *root*."""
    return list_modules(read_descriptor(editor, root))


def find_modules(editor: FileEditor, root: str | Path, module_type: str) -> list[dict[str, Any]]:
    """List every module of *module_type* declared under *root*.

    Each result is ``{"path": <directory name>, **stored properties}``, in the
    order the modules are declared.
    """
    root = Path(root)
    modules: list[dict[str, Any]] = []
    for module in list_parent_modules(editor, root):
        stored = Sidecar(editor, root / module).get(module_type)
        if stored is not None:
            modules.append({"path": module, **stored})
    logger.debug("Found %d '%s' module(s) under %s", len(modules), module_type, root)
    return modules


def find_module(
    editor: FileEditor,
    root: str | Path,
    module_type: str,
    artifact_id: str,
) -> dict[str, Any] | None:
    """Resolve a module of *module_type* by its artifactId."""
    return next(
        (m for m in find_modules(editor, root, module_type) if m.get("artifactId") == artifact_id),
        None,
    )


def duplicate_check(editor: FileEditor, destination: str | Path, module_type: str) -> None:
    """Refuse a second module of a singleton type.

    Sibling directories listed by the parent descriptor are scanned; a
    sidecar entry for *module_type* in any directory other than
    *destination* is a conflict.

    Raises:
        ConflictError: If another module of *module_type* already exists.
    """
    destination = Path(destination)
    root = destination.parent
    for module in list_parent_modules(editor, root):
        if module == destination.name:
            continue
        if Sidecar(editor, root / module).get(module_type) is not None:
            raise ConflictError(f"Refusing to create a second '{module_type}' module.")
