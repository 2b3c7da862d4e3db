"""Shared pytest fixtures for the mvnscaffold test suite.

Provides reusable fixtures for:
- A temporary project directory
- A mocked artifact repository (httpx MockTransport) and metadata client
- Generation environments sharing one file editor across runs
- A helper running the project generator with sensible defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest

from mvnscaffold.config import ScaffoldConfig
from mvnscaffold.generators import Environment, ProjectGenerator, StaticPrompter
from mvnscaffold.maven import MavenMetadataClient
from mvnscaffold.state.editor import FileEditor

REPOSITORY_URL = "https://repo.test/maven2"

# artifactId -> (versions..., latest last)
RELEASES: dict[str, list[str]] = {
    "aem-sdk-api": ["2023.1.10912.20230130T173736Z-230100", "2023.2.11289.20230224T170559Z-230200"],
    "uber-jar": ["6.5.14", "6.5.15"],
    "aem-cloud-testing-clients": ["1.1.0", "1.2.0"],
    "cq-testing-clients-65": ["1.1.0", "1.1.2"],
}


def metadata_xml(group_id: str, artifact_id: str, versions: list[str]) -> str:
    """Render a ``maven-metadata.xml`` document like the ones a repository serves."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<metadata>",
        f"  <groupId>{group_id}</groupId>",
        f"  <artifactId>{artifact_id}</artifactId>",
        "  <versioning>",
        f"    <latest>{versions[-1]}</latest>",
        f"    <release>{versions[-1]}</release>",
        "    <versions>",
        *(f"      <version>{version}</version>" for version in versions),
        "    </versions>",
        "  </versioning>",
        "</metadata>",
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Directory the test project is generated into (not created up front)."""
    return tmp_path / "mysite"


# ---------------------------------------------------------------------------
# Mock artifact repository
# ---------------------------------------------------------------------------

@pytest.fixture
def requested_paths() -> list[str]:
    """Paths requested from the mock repository, in order."""
    return []


@pytest.fixture
def metadata_transport(requested_paths: list[str]) -> httpx.MockTransport:
    """Serve ``maven-metadata.xml`` for every artifact listed in ``RELEASES``."""

    def handler(request: httpx.Request) -> httpx.Response:
        requested_paths.append(request.url.path)
        parts = request.url.path.strip("/").split("/")
        # maven2/<group path...>/<artifactId>/maven-metadata.xml
        artifact_id = parts[-2]
        group_id = ".".join(parts[1:-2])
        if artifact_id not in RELEASES:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, text=metadata_xml(group_id, artifact_id, RELEASES[artifact_id]))

    return httpx.MockTransport(handler)


@pytest.fixture
def metadata_client(metadata_transport: httpx.MockTransport) -> MavenMetadataClient:
    return MavenMetadataClient(base_url=REPOSITORY_URL, transport=metadata_transport)


# ---------------------------------------------------------------------------
# Generation environment
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> ScaffoldConfig:
    """Configuration that never runs the external build."""
    return ScaffoldConfig(skip_install=True, repository_url=REPOSITORY_URL)


@pytest.fixture
def editor() -> FileEditor:
    """File editor writing to the real (temporary) file system."""
    return FileEditor()


@pytest.fixture
def make_env(editor: FileEditor, config: ScaffoldConfig, metadata_client: MavenMetadataClient, tmp_path: Path):
    """Factory for fresh environments sharing the editor and metadata client.

    Every generator run needs its own environment, since the environment
    remembers which generator is the root of the run.
    """

    def _make(answers: dict[str, Any] | None = None, **overrides: Any) -> Environment:
        kwargs: dict[str, Any] = {
            "editor": editor,
            "config": config,
            "metadata": metadata_client,
            "prompter": StaticPrompter(answers),
            "cwd": tmp_path,
        }
        kwargs.update(overrides)
        return Environment(**kwargs)

    return _make


@pytest.fixture
def project_options(project_dir: Path) -> dict[str, Any]:
    """Options for a non-interactive project generation."""
    return {
        "generateInto": str(project_dir),
        "groupId": "com.example",
        "appId": "mysite",
        "name": "My Site",
        "defaults": True,
    }


@pytest.fixture
def run_project(make_env, project_options: dict[str, Any]):
    """Run the project generator; keyword arguments override ``project_options``.

    Usage:
        async def test_something(run_project):
            generator = await run_project(modules=["bundle"])
    """

    async def _run(**overrides: Any) -> ProjectGenerator:
        generator = ProjectGenerator(make_env(), {**project_options, **overrides})
        await generator.run()
        return generator

    return _run
