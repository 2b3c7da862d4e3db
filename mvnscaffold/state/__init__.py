"""Generation state: the file editor, sidecar records and module discovery."""

from mvnscaffold.state.discovery import (
    duplicate_check,
    find_module,
    find_modules,
    find_project_root,
    list_parent_modules,
)
from mvnscaffold.state.editor import FileEditor
from mvnscaffold.state.sidecar import PROJECT_TYPE, SIDECAR_FILENAME, Sidecar

__all__ = [
    "FileEditor",
    "PROJECT_TYPE",
    "SIDECAR_FILENAME",
    "Sidecar",
    "duplicate_check",
    "find_module",
    "find_modules",
    "find_project_root",
    "list_parent_modules",
]
