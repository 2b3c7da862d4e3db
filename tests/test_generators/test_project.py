"""Tests for the project (root) generator (mvnscaffold.generators.project).

Covers:
- Default module composition and the root descriptor
- Target platform handling (cloud vs 6.5, Java version)
- Destination relocation, coordinate conflicts and re-runs
- Module selection as types, directory mapping and per-module options
- All-or-nothing commit and a single build from the project root
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest

from mvnscaffold.config import ScaffoldConfig
from mvnscaffold.errors import (
    ConflictError,
    DependencyPreconditionError,
    InvalidInputError,
    MetadataLookupError,
)
from mvnscaffold.generators import DEFAULT_MODULES, ProjectGenerator
from mvnscaffold.generators import lifecycle as lifecycle_module
from mvnscaffold.generators.project import validate_group_id
from mvnscaffold.maven import MavenMetadataClient
from mvnscaffold.pom.reader import list_modules
from mvnscaffold.pom.tree import element, find_section, find_text, leaf, parse, serialize
from mvnscaffold.state.sidecar import SIDECAR_FILENAME

SDK_VERSION = "2023.2.11289.20230224T170559Z-230200"


def read_pom(directory: Path):
    return parse((directory / "pom.xml").read_text(encoding="utf-8"))


def read_sidecar(directory: Path) -> dict:
    return json.loads((directory / SIDECAR_FILENAME).read_text(encoding="utf-8"))


@pytest.mark.unit
class TestValidateGroupId:
    def test_valid(self):
        assert validate_group_id("com.example") is None

    def test_invalid(self):
        assert validate_group_id("") == "GroupId must be provided."
        assert validate_group_id("com.example-1") == "GroupId must only contain letters or periods (.)."


@pytest.mark.integration
class TestDefaultProject:
    @pytest.mark.asyncio
    async def test_every_default_module_is_generated(self, run_project, project_dir: Path):
        await run_project()

        assert list_modules(read_pom(project_dir)) == list(DEFAULT_MODULES)
        for directory, module_type in DEFAULT_MODULES.items():
            assert (project_dir / directory / "pom.xml").is_file(), directory
            assert module_type in read_sidecar(project_dir / directory)

    @pytest.mark.asyncio
    async def test_root_sidecar(self, run_project, project_dir: Path):
        await run_project()
        project = read_sidecar(project_dir)["project"]
        assert project["groupId"] == "com.example"
        assert project["artifactId"] == "mysite"
        assert project["version"] == "1.0.0-SNAPSHOT"
        assert project["aemVersion"] == "cloud"
        assert project["javaVersion"] == "11"
        assert project["examples"] is False

    @pytest.mark.asyncio
    async def test_root_descriptor(self, run_project, project_dir: Path):
        await run_project()
        project = read_pom(project_dir).root.children
        assert find_text(project, "groupId") == "com.example"
        assert find_text(project, "artifactId") == "mysite"
        assert find_text(project, "packaging") == "pom"
        assert find_text(project, "properties", "aem.version") == SDK_VERSION
        assert find_text(project, "properties", "java.version") == "11"
        managed = find_section(project, "dependencyManagement", "dependencies")
        assert find_text(managed[0].children, "artifactId") == "aem-sdk-api"

    @pytest.mark.asyncio
    async def test_shared_files(self, run_project, project_dir: Path):
        await run_project()
        readme = (project_dir / "README.md").read_text(encoding="utf-8")
        assert "# My Site" in readme
        assert "`com.example:mysite:1.0.0-SNAPSHOT`" in readme
        assert (project_dir / ".gitignore").is_file()

    @pytest.mark.asyncio
    async def test_children_share_parent_coordinates(self, run_project, project_dir: Path):
        await run_project()
        for directory in DEFAULT_MODULES:
            parent = find_section(read_pom(project_dir / directory).nodes, "project", "parent")
            assert find_text(parent, "groupId") == "com.example"
            assert find_text(parent, "artifactId") == "mysite"
            assert find_text(parent, "version") == "1.0.0-SNAPSHOT"


@pytest.mark.integration
class TestPlatformVersion:
    @pytest.mark.asyncio
    async def test_legacy_platform(self, run_project, project_dir: Path):
        await run_project(aemVersion="6.5", javaVersion="8", modules=["bundle"])
        project = read_pom(project_dir).root.children
        assert find_text(project, "properties", "aem.version") == "6.5.15"
        assert find_text(project, "properties", "java.version") == "8"
        managed = find_section(project, "dependencyManagement", "dependencies")
        assert find_text(managed[0].children, "artifactId") == "uber-jar"

    @pytest.mark.asyncio
    async def test_cloud_forces_java_11(self, run_project, project_dir: Path):
        generator = await run_project(aemVersion="cloud", javaVersion="8", modules=["bundle"])
        assert generator.props["javaVersion"] == "11"

    @pytest.mark.asyncio
    async def test_unknown_versions_fall_back_to_defaults(self, run_project):
        generator = await run_project(aemVersion="6.4", javaVersion="17", modules=["bundle"])
        assert generator.props["aemVersion"] == "cloud"
        assert generator.props["javaVersion"] == "11"


@pytest.mark.integration
class TestDestination:
    @pytest.mark.asyncio
    async def test_relocates_into_app_id(self, make_env, project_options, tmp_path: Path):
        options = {k: v for k, v in project_options.items() if k != "generateInto"}
        generator = ProjectGenerator(make_env(), {**options, "modules": ["bundle"]})
        await generator.run()
        assert generator.destination == tmp_path / "mysite"
        assert (tmp_path / "mysite" / "pom.xml").is_file()

    @pytest.mark.asyncio
    async def test_no_relocation_when_already_named(self, make_env, project_options, tmp_path: Path):
        options = {k: v for k, v in project_options.items() if k != "generateInto"}
        (tmp_path / "mysite").mkdir()
        generator = ProjectGenerator(make_env(cwd=tmp_path / "mysite"), {**options, "modules": ["bundle"]})
        await generator.run()
        assert generator.destination == tmp_path / "mysite"


@pytest.mark.integration
class TestRerun:
    @pytest.mark.asyncio
    async def test_different_coordinates_rejected(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"])
        with pytest.raises(ConflictError, match="different group/artifact identifiers"):
            await run_project(groupId="org.other", modules=["bundle"])
        assert find_text(read_pom(project_dir).nodes, "project", "groupId") == "com.example"

    @pytest.mark.asyncio
    async def test_rerun_regenerates_existing_modules(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"])
        generator = await run_project()
        assert generator.modules == {"core": "bundle"}
        assert not (project_dir / "ui.apps").exists()

    @pytest.mark.asyncio
    async def test_rerun_loads_stored_properties(self, make_env, run_project, project_dir: Path):
        await run_project(aemVersion="6.5", javaVersion="8", modules=["bundle"])
        generator = ProjectGenerator(make_env(), {"generateInto": str(project_dir), "defaults": True})
        await generator.run()
        assert generator.props["groupId"] == "com.example"
        assert generator.props["aemVersion"] == "6.5"
        assert generator.props["javaVersion"] == "8"

    @pytest.mark.asyncio
    async def test_rerun_keeps_custom_root_content(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"])
        pom = project_dir / "pom.xml"
        text = pom.read_text(encoding="utf-8").replace(
            "<modules>", "<modules>\n    <module>handmade</module>"
        )
        pom.write_text(text, encoding="utf-8")

        await run_project(modules=["bundle"])

        assert list_modules(read_pom(project_dir)) == ["core", "handmade"]

    @pytest.mark.asyncio
    async def test_rerun_keeps_custom_managed_entries(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"])
        document = read_pom(project_dir)
        find_section(document.nodes, "project", "dependencyManagement", "dependencies").append(
            element("dependency", leaf("groupId", "org.custom"), leaf("artifactId", "managed-lib"))
        )
        find_section(document.nodes, "project", "build", "pluginManagement", "plugins").append(
            element("plugin", leaf("artifactId", "custom-managed-plugin"))
        )
        (project_dir / "pom.xml").write_text(serialize(document), encoding="utf-8")

        await run_project(modules=["bundle"])

        project = find_section(read_pom(project_dir).nodes, "project")
        managed = find_section(project, "dependencyManagement", "dependencies")
        assert "managed-lib" in [find_text(d.children, "artifactId") for d in managed]
        plugins = find_section(project, "build", "pluginManagement", "plugins")
        assert "custom-managed-plugin" in [find_text(p.children, "artifactId") for p in plugins]

    @pytest.mark.asyncio
    async def test_rerun_on_new_platform_replaces_api(self, run_project, project_dir: Path):
        await run_project(aemVersion="6.5", javaVersion="8", modules=["bundle"])
        await run_project(aemVersion="cloud", modules=["bundle"])

        managed = find_section(read_pom(project_dir).nodes, "project", "dependencyManagement", "dependencies")
        artifacts = [find_text(d.children, "artifactId") for d in managed]
        assert "aem-sdk-api" in artifacts
        assert "uber-jar" not in artifacts
        bundle = find_section(read_pom(project_dir / "core").nodes, "project", "dependencies")
        core = [find_text(d.children, "artifactId") for d in bundle]
        assert "aem-sdk-api" in core
        assert "uber-jar" not in core

    @pytest.mark.asyncio
    async def test_module_directory_rejected(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"])
        core = project_dir / "core"
        before = (core / "pom.xml").read_text(encoding="utf-8")

        with pytest.raises(ConflictError, match="Refusing to create Project in a bundle module directory"):
            await run_project(generateInto=str(core), modules=[])

        assert (core / "pom.xml").read_text(encoding="utf-8") == before
        assert list(read_sidecar(core)) == ["bundle"]


@pytest.mark.integration
class TestModuleSelection:
    @pytest.mark.asyncio
    async def test_types_use_default_directories(self, run_project, project_dir: Path):
        generator = await run_project(modules=["package-all", "bundle"])
        assert generator.modules == {"core": "bundle", "all": "package-all"}

    @pytest.mark.asyncio
    async def test_directory_mapping(self, run_project, project_dir: Path):
        await run_project(modules={"extra": "bundle", "core": "bundle"})
        assert read_sidecar(project_dir / "extra")["bundle"]["artifactId"] == "mysite.extra"
        assert read_sidecar(project_dir / "core")["bundle"]["artifactId"] == "mysite.core"

    @pytest.mark.asyncio
    async def test_unknown_type(self, run_project, project_dir: Path):
        with pytest.raises(InvalidInputError, match="Unknown module type 'dispatcher'"):
            await run_project(modules=["dispatcher"])
        with pytest.raises(InvalidInputError):
            await run_project(modules={"x": "dispatcher"})
        assert not project_dir.exists()

    @pytest.mark.asyncio
    async def test_module_options(self, run_project, project_dir: Path):
        await run_project(modules=["bundle"], moduleOptions={"core": {"package": "com.custom", "artifactId": "core.custom"}})
        entry = read_sidecar(project_dir / "core")["bundle"]
        assert entry["package"] == "com.custom"
        assert entry["artifactId"] == "core.custom"
        assert (project_dir / "core/src/main/java/com/custom/package-info.java").is_file()


@pytest.mark.integration
class TestCommitAndBuild:
    @pytest.mark.asyncio
    async def test_failed_child_writes_nothing(self, run_project, project_dir: Path):
        with pytest.raises(DependencyPreconditionError):
            await run_project(modules={"ui.content": "package-content"})
        assert not project_dir.exists()

    @pytest.mark.asyncio
    async def test_metadata_failure_writes_nothing(self, make_env, project_options, project_dir: Path):
        offline = MavenMetadataClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        generator = ProjectGenerator(make_env(metadata=offline), {**project_options, "modules": ["bundle"]})
        with pytest.raises(MetadataLookupError):
            await generator.run()
        assert not project_dir.exists()

    @pytest.mark.asyncio
    async def test_single_build_from_project_root(self, make_env, project_options, project_dir: Path, monkeypatch):
        runner = AsyncMock(return_value=(0, "", ""))
        monkeypatch.setattr(lifecycle_module, "run_command", runner)
        generator = ProjectGenerator(
            make_env(config=ScaffoldConfig()),
            {**project_options, "modules": ["bundle", "package-structure"]},
        )
        await generator.run()
        runner.assert_awaited_once()
        assert runner.await_args.kwargs["cwd"] == project_dir
