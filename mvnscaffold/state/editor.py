"""In-memory file editor used by every generator.

Generators never touch the disk directly: reads and writes go through a
``FileEditor`` which keeps written files in memory until :meth:`commit` is
called.  A generator that fails during its checks therefore leaves the disk
untouched, and tests can run an entire generation with ``persist=False``
without creating any file.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class FileEditor:
    """Overlay of pending writes on top of the file system.

    Args:
        persist: When ``False`` the disk is neither read nor written; every
            file lives in memory only.
    """

    def __init__(self, persist: bool = True) -> None:
        self.persist = persist
        self._files: dict[Path, str] = {}
        self._pending: set[Path] = set()

    @staticmethod
    def _key(path: str | Path) -> Path:
        return Path(os.path.abspath(path))

    # -- Reading -----------------------------------------------------------

    def exists(self, path: str | Path) -> bool:
        key = self._key(path)
        if key in self._files:
            return True
        return self.persist and key.is_file()

    def read(self, path: str | Path) -> str:
        """Return the current content of *path*.

        Raises:
            FileNotFoundError: If the file is neither pending nor on disk.
        """
        key = self._key(path)
        if key in self._files:
            return self._files[key]
        if not self.persist:
            raise FileNotFoundError(str(key))
        return key.read_text(encoding="utf-8")

    def read_json(self, path: str | Path, default: dict[str, Any] | None = None) -> dict[str, Any]:
        """Load a JSON object, returning *default* (or ``{}``) when absent."""
        if not self.exists(path):
            return dict(default or {})
        data = json.loads(self.read(path))
        if not isinstance(data, dict):
            return {"_root": data}
        return data

    # -- Writing -----------------------------------------------------------

    def write(self, path: str | Path, content: str) -> Path:
        key = self._key(path)
        self._files[key] = content
        self._pending.add(key)
        return key

    def write_json(self, path: str | Path, data: dict[str, Any]) -> Path:
        content = json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"
        return self.write(path, content)

    # -- State -------------------------------------------------------------

    @property
    def pending(self) -> list[Path]:
        """Paths written since the last commit, in sorted order."""
        return sorted(self._pending)

    async def commit(self) -> list[Path]:
        """Flush pending writes to disk and return the written paths.

        With ``persist=False`` nothing is written; files stay readable from
        memory.
        """
        written = self.pending
        if self.persist:
            for path in written:
                await asyncio.to_thread(_write_file, path, self._files[path])
            for path in written:
                del self._files[path]
        self._pending.clear()
        return written
