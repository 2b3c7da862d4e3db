"""mvnscaffold configuration.

Typed settings for everything that is not a generation property: how the
external build is run and where artifact metadata is looked up.  Settings use
Pydantic v2 models so they are validated at construction time and can be
serialised to/from JSON or environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_REPOSITORY_URL = "https://repo1.maven.org/maven2"


class ScaffoldConfig(BaseModel):
    """Global mvnscaffold configuration.

    Instances are typically created once by the CLI entry point and then
    carried by the generation ``Environment``.
    """

    show_build_output: bool = Field(
        default=True, description="Stream the build tool output instead of capturing it"
    )
    skip_install: bool = Field(
        default=False, description="Do not run the build after generation"
    )
    build_command: list[str] = Field(default_factory=lambda: ["mvn", "clean", "verify"])
    build_timeout: int = Field(default=1800, ge=60, description="Build timeout in seconds")
    repository_url: str = Field(default=DEFAULT_REPOSITORY_URL)
    http_timeout: int = Field(default=30, ge=1, description="Metadata lookup timeout in seconds")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            MVNSCAFFOLD_SHOW_BUILD_OUTPUT, MVNSCAFFOLD_SKIP_INSTALL,
            MVNSCAFFOLD_BUILD_COMMAND, MVNSCAFFOLD_BUILD_TIMEOUT,
            MVNSCAFFOLD_REPOSITORY_URL, MVNSCAFFOLD_HTTP_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MVNSCAFFOLD_SHOW_BUILD_OUTPUT"):
            kwargs["show_build_output"] = _env_flag("MVNSCAFFOLD_SHOW_BUILD_OUTPUT")
        if os.environ.get("MVNSCAFFOLD_SKIP_INSTALL"):
            kwargs["skip_install"] = _env_flag("MVNSCAFFOLD_SKIP_INSTALL")
        if os.environ.get("MVNSCAFFOLD_BUILD_COMMAND"):
            kwargs["build_command"] = os.environ["MVNSCAFFOLD_BUILD_COMMAND"].split()
        if os.environ.get("MVNSCAFFOLD_BUILD_TIMEOUT"):
            kwargs["build_timeout"] = int(os.environ["MVNSCAFFOLD_BUILD_TIMEOUT"])
        if os.environ.get("MVNSCAFFOLD_REPOSITORY_URL"):
            kwargs["repository_url"] = os.environ["MVNSCAFFOLD_REPOSITORY_URL"]
        if os.environ.get("MVNSCAFFOLD_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = int(os.environ["MVNSCAFFOLD_HTTP_TIMEOUT"])
        return cls(**kwargs)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")
