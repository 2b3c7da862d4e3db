"""Per-directory generation state (the sidecar file).

Each module directory holds a small JSON document whose top-level keys are
module-type tags.  The value under a tag is the free-form set of properties
recorded when that module was generated, including its ``moduleType``.  The
project root's sidecar carries the project-wide properties under the
``project`` tag.

Example ``core/.mvnscaffold.json``::

    {
      "bundle": {
        "moduleType": "bundle",
        "artifactId": "mysite.core",
        "package": "com.mysite"
      }
    }
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .editor import FileEditor

SIDECAR_FILENAME = ".mvnscaffold.json"
PROJECT_TYPE = "project"


class Sidecar:
    """Read/write access to one directory's sidecar through a ``FileEditor``."""

    def __init__(
        self,
        editor: FileEditor,
        directory: str | Path,
        filename: str = SIDECAR_FILENAME,
    ) -> None:
        self.editor = editor
        self.directory = Path(directory)
        self.filename = filename

    @property
    def path(self) -> Path:
        return self.directory / self.filename

    def exists(self) -> bool:
        return self.editor.exists(self.path)

    def read_all(self) -> dict[str, Any]:
        return self.editor.read_json(self.path)

    def get(self, module_type: str) -> dict[str, Any] | None:
        """Return the stored properties for *module_type*, or ``None``."""
        value = self.read_all().get(module_type)
        return dict(value) if isinstance(value, dict) else None

    def recorded_module_types(self) -> set[str]:
        """Every ``moduleType`` declared by the entries of this sidecar."""
        return {
            value["moduleType"]
            for value in self.read_all().values()
            if isinstance(value, dict) and value.get("moduleType")
        }

    def merge(self, module_type: str, values: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge *values* into the entry for *module_type* and save.

        Keys present in *values* overwrite stored ones; other stored keys are
        kept.  Returns the merged entry.
        """
        data = self.read_all()
        current = dict(data.get(module_type) or {})
        current.update(values)
        data[module_type] = current
        self.editor.write_json(self.path, data)
        return current
