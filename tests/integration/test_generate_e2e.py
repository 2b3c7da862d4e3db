"""End-to-end tests for generating a complete project.

These tests run the project generator with defaults against a mocked artifact
repository and check the generated tree as a whole: every descriptor parses,
every sidecar and OSGi configuration is valid JSON, and a second run over the
same project changes nothing.

No network access or Maven installation is required.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mvnscaffold.pom.tree import parse
from mvnscaffold.state.sidecar import SIDECAR_FILENAME


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def snapshot(root: Path) -> dict[str, str]:
    """Relative path -> content of every file under *root*."""
    return {
        str(path.relative_to(root)): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestDefaultProjectE2E:
    """Generate the default project in one go."""

    @pytest.mark.asyncio
    async def test_generated_files_are_well_formed(self, run_project, project_dir: Path):
        await run_project()
        files = snapshot(project_dir)

        poms = [name for name in files if name.endswith("pom.xml")]
        assert len(poms) == 8
        for name in poms:
            assert parse(files[name]).root.tag == "project", name

        for name in files:
            if name.endswith((".json", SIDECAR_FILENAME)):
                json.loads(files[name])

    @pytest.mark.asyncio
    async def test_repository_lookups(self, run_project, requested_paths: list[str]):
        await run_project()
        assert requested_paths == [
            "/maven2/com/adobe/aem/aem-sdk-api/maven-metadata.xml",
            "/maven2/com/adobe/cq/aem-cloud-testing-clients/maven-metadata.xml",
        ]

    @pytest.mark.asyncio
    async def test_rerun_is_stable(self, run_project, project_dir: Path):
        await run_project()
        first = snapshot(project_dir)

        await run_project()

        assert snapshot(project_dir) == first
