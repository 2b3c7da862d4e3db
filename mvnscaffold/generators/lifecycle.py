"""Shared lifecycle of every module generator.

A generator runs its phases strictly in sequence::

    initializing -> prompting -> configuring -> default -> writing
        -> (root only) commit -> install

``ModuleLifecycle`` holds the state and behaviour those phases share (loading
inherited properties, the common prompts, persisting the sidecar entry,
descriptor merging, module discovery and the build hook).  It is composed
into each generator rather than mixed in, so a generator only reaches the
shared behaviour through ``self.lifecycle``.

Property precedence when a module loads, highest first:

1. explicit invocation options,
2. the module's own sidecar entry,
3. the module's own ``pom.xml`` (``artifactId``, ``name``),
4. computed defaults.

Parent properties come from the ``parent`` option, then the parent
directory's sidecar and ``pom.xml``.  They are exposed read-only and never
persisted with the module.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from mvnscaffold.config import ScaffoldConfig
from mvnscaffold.errors import BuildError, ContextError, ConflictError
from mvnscaffold.maven import MavenMetadataClient, api_coordinates
from mvnscaffold.pom.fixups import fix_serialized_output
from mvnscaffold.pom.merge import Coordinates, add_module, merge_descriptor
from mvnscaffold.pom.reader import POM_FILENAME, read_descriptor, read_pom_properties
from mvnscaffold.pom.tree import Document, Node, find_section, parse, serialize
from mvnscaffold.renderer import TemplateRenderer
from mvnscaffold.state import discovery
from mvnscaffold.state.editor import FileEditor
from mvnscaffold.state.sidecar import PROJECT_TYPE, Sidecar
from mvnscaffold.utils import print_success, run_command

from .prompts import Prompter, Question, StaticPrompter, required

logger = logging.getLogger(__name__)

SHARED_OPTIONS = ("examples", "name", "appId", "artifactId")
PARENT_PROPERTIES = ("groupId", "artifactId", "version", "name", "appId", "javaVersion", "aemVersion")

_INVALID_ARTIFACT_ID = re.compile(r"[^a-zA-Z.-]")
INVALID_PACKAGE = re.compile(r"[^a-zA-Z.]")


def validate_artifact_id(value: Any) -> str | None:
    if not value:
        return "ArtifactId must be provided."
    if _INVALID_ARTIFACT_ID.search(str(value)):
        return "ArtifactId must only contain letters, hyphens, or periods (.)."
    return None


def is_valid_package(value: Any) -> bool:
    return bool(value) and not INVALID_PACKAGE.search(str(value))


def validate_package(value: Any) -> str | None:
    if not value:
        return "Package must be provided."
    if INVALID_PACKAGE.search(str(value)):
        return "Package must only contain letters or periods (.)."
    return None


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@dataclass
class Environment:
    """Everything a generation run shares across composed generators."""

    editor: FileEditor = field(default_factory=FileEditor)
    config: ScaffoldConfig = field(default_factory=ScaffoldConfig)
    renderer: TemplateRenderer = field(default_factory=TemplateRenderer)
    prompter: Prompter = field(default_factory=StaticPrompter)
    metadata: MavenMetadataClient | None = None
    cwd: Path = field(default_factory=Path.cwd)
    root_generator: Any = None

    def __post_init__(self) -> None:
        if self.metadata is None:
            self.metadata = MavenMetadataClient(
                base_url=self.config.repository_url,
                timeout=self.config.http_timeout,
            )

    def is_root(self, generator: Any) -> bool:
        return self.root_generator is generator

    def resolve_destination(self, options: dict[str, Any]) -> Path:
        into = options.get("generateInto")
        path = Path(into) if into else self.cwd
        if not path.is_absolute():
            path = self.cwd / path
        return path


# ---------------------------------------------------------------------------
# Module lifecycle
# ---------------------------------------------------------------------------


class ModuleLifecycle:
    """Shared state and behaviour of one generator invocation."""

    def __init__(
        self,
        env: Environment,
        module_type: str,
        destination: Path,
        options: dict[str, Any],
        display_name: str,
        template_name: str,
    ) -> None:
        self.env = env
        self.module_type = module_type
        self.destination = destination
        self.options = options
        self.display_name = display_name
        self.template_name = template_name
        self.props: dict[str, Any] = {}
        self.parent_props: dict[str, Any] = {}

    @property
    def editor(self) -> FileEditor:
        return self.env.editor

    @property
    def project_root(self) -> Path:
        return self.destination.parent

    @property
    def defaults(self) -> bool:
        return bool(self.options.get("defaults"))

    # -- initializing ------------------------------------------------------

    def load(self, unique: tuple[str, ...] = ()) -> dict[str, Any]:
        """Resolve this module's properties and its inherited parent context.

        Raises:
            ContextError: When run from the project root itself, or with no
                parent project context at all.
            ConflictError: When the destination already holds a module of a
                different type.
        """
        own = Sidecar(self.editor, self.destination)
        if discovery.find_project_root(self.editor, self.destination) == self.destination:
            raise ContextError(
                "Running a module generator requires a destination path, when running from project root."
            )

        props = {key: self.options[key] for key in (*SHARED_OPTIONS, *unique) if key in self.options}

        parent = dict(self.options.get("parent") or {})
        parent_sources = (
            Sidecar(self.editor, self.project_root).get(PROJECT_TYPE) or {},
            read_pom_properties(self.editor, self.project_root),
        )
        for source in parent_sources:
            for key in PARENT_PROPERTIES:
                if key in source:
                    parent.setdefault(key, source[key])

        stored = own.get(self.module_type) or {}
        if not stored and not parent:
            raise ContextError(
                f"{self.display_name} Generator cannot be used outside existing project context.\n\n"
                f"You are trying to use the {self.display_name} Generator without the context of a parent project.\n"
                "Either run it inside a project previously created with mvnscaffold, or add the module "
                "from the project root using the --modules option."
            )

        foreign = own.recorded_module_types() - {self.module_type}
        if foreign:
            raise ConflictError(
                f"Refusing to create {self.display_name} module in a non-{self.module_type} directory."
            )

        for key, value in stored.items():
            props.setdefault(key, value)
        pom = read_pom_properties(self.editor, self.destination)
        for key in ("artifactId", "name"):
            if key in pom:
                props.setdefault(key, pom[key])
        if parent.get("appId"):
            props.setdefault("appId", parent["appId"])
        props.setdefault("moduleType", self.module_type)

        self.props = props
        self.parent_props = parent
        logger.debug("Loaded %s properties for %s: %s", self.module_type, self.destination, props)
        return props

    # -- prompting ---------------------------------------------------------

    async def prompt(self, extra: list[Question] | None = None) -> dict[str, Any]:
        """Ask the shared questions plus *extra*, and merge the answers."""
        props = self.props
        prompter = self.env.prompter

        first = await prompter.ask([
            Question(
                "examples",
                "Include any examples in generated projects?",
                kind="confirm",
                default=False,
                when=not self.defaults and "examples" not in props,
            ),
            Question(
                "name",
                'What is the module name? (e.g. "My Site - Core")',
                default=self._default_name(),
                when="name" not in props,
                validate=required("Name"),
            ),
            Question(
                "appId",
                'What is the app\'s technical name? (e.g. "mysite")',
                default=self.parent_props.get("appId"),
                when="appId" not in props,
                validate=required("AppId"),
            ),
        ])
        props.update(first)

        second = await prompter.ask([
            Question(
                "artifactId",
                'What is the Maven Artifact ID? (e.g. "mysite.core")',
                default=self.default_artifact_id(),
                when=not self.defaults and "artifactId" not in props,
                validate=validate_artifact_id,
            ),
            *(extra or []),
        ])
        props.update(second)

        props.setdefault("examples", False)
        if "artifactId" not in props:
            props["artifactId"] = self.default_artifact_id()
        return {**first, **second}

    def _default_name(self) -> str | None:
        parent_name = self.parent_props.get("name")
        if parent_name:
            return f"{parent_name} - {self.display_name}"
        return None

    def default_artifact_id(self) -> str:
        return f"{self.props.get('appId')}.{self.destination.name}"

    # -- configuring -------------------------------------------------------

    def save(self) -> dict[str, Any]:
        """Merge the module properties into its sidecar entry."""
        return Sidecar(self.editor, self.destination).merge(self.module_type, dict(self.props))

    # -- default -----------------------------------------------------------

    def duplicate_check(self) -> None:
        discovery.duplicate_check(self.editor, self.destination, self.module_type)

    def find_modules(self, module_type: str) -> list[dict[str, Any]]:
        return discovery.find_modules(self.editor, self.project_root, module_type)

    def find_module(self, module_type: str, artifact_id: str) -> dict[str, Any] | None:
        return discovery.find_module(self.editor, self.project_root, module_type, artifact_id)

    # -- writing -----------------------------------------------------------

    def context(self, **extra: Any) -> dict[str, Any]:
        """Template context: module properties, the parent block and the platform API."""
        return {
            **self.props,
            "parent": self.parent_props,
            "api": api_coordinates(self.parent_props.get("aemVersion")),
            **extra,
        }

    def write_templates(self, prefix: str, context: dict[str, Any], directory: Path | None = None) -> list[Path]:
        """Render the ``<generator>/<prefix>`` template tree into *directory*."""
        return self.env.renderer.render_tree(
            f"{self.template_name}/{prefix}",
            directory or self.destination,
            context,
            self.editor,
        )

    def render_descriptor(self, context: dict[str, Any], template: str = "pom.xml.j2") -> Document:
        return parse(self.env.renderer.render(f"{self.template_name}/{template}", context))

    def write_descriptor(
        self,
        document: Document,
        directory: Path | None = None,
        finalize: Callable[[list[Node]], None] | None = None,
    ) -> Path:
        """Merge *document* with the descriptor on disk (if any) and write it.

        *finalize* receives the merged ``<project>`` children, for changes
        that must also apply to entries carried over from disk.
        """
        directory = directory or self.destination
        existing = read_descriptor(self.editor, directory)
        if existing is not None:
            merge_descriptor(document, existing)
        if finalize is not None:
            project = find_section(document.nodes, "project")
            if project is not None:
                finalize(project)
        return self.editor.write(directory / POM_FILENAME, fix_serialized_output(serialize(document)))

    def register_with_parent(self) -> None:
        """Add this module's directory to the parent descriptor's module list.

        Raises:
            ContextError: If the parent directory has no descriptor.
        """
        document = read_descriptor(self.editor, self.project_root)
        project = find_section(document.nodes, "project") if document else None
        if project is None:
            raise ContextError(f"No parent descriptor found in {self.project_root}.")
        add_module(project, self.destination.name)
        self.editor.write(self.project_root / POM_FILENAME, fix_serialized_output(serialize(document)))

    async def latest_api(self) -> Coordinates:
        """Platform API coordinates (with latest version) for the parent's AEM version."""
        return await self.env.metadata.latest_release(api_coordinates(self.parent_props.get("aemVersion")))

    # -- install -----------------------------------------------------------

    async def install(self, cwd: Path) -> None:
        """Run the external build in *cwd*.

        Raises:
            BuildError: If the build exits with a non-zero status.
        """
        config = self.env.config
        if config.skip_install or self.options.get("skipInstall"):
            logger.info("Skipping build in %s", cwd)
            return
        show_output = self.options.get("showBuildOutput", config.show_build_output)
        returncode, stdout, stderr = await run_command(
            config.build_command,
            cwd=cwd,
            timeout=config.build_timeout,
            capture=not show_output,
        )
        if returncode != 0:
            raise BuildError(returncode, stderr or stdout or f"exit status {returncode}")
        print_success(f"Build succeeded in {cwd}")


# ---------------------------------------------------------------------------
# Generator base
# ---------------------------------------------------------------------------


class Generator:
    """Base class running the generation phases for one module.

    Subclasses set ``module_type`` and ``display_name`` and implement
    :meth:`writing`; singleton module types set ``singleton = True``.
    """

    module_type: ClassVar[str]
    display_name: ClassVar[str]
    template_name: ClassVar[str | None] = None
    singleton: ClassVar[bool] = False
    unique_options: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        env: Environment,
        options: dict[str, Any] | None = None,
        lifecycle: ModuleLifecycle | None = None,
    ) -> None:
        self.env = env
        self.options = {k: v for k, v in (options or {}).items() if v is not None}
        self.destination = env.resolve_destination(self.options)
        self.lifecycle = lifecycle or ModuleLifecycle(
            env,
            self.module_type,
            self.destination,
            self.options,
            self.display_name,
            self.template_name or self.module_type,
        )

    @property
    def props(self) -> dict[str, Any]:
        return self.lifecycle.props

    @property
    def parent_props(self) -> dict[str, Any]:
        return self.lifecycle.parent_props

    @property
    def is_root(self) -> bool:
        return self.env.is_root(self)

    async def run(self) -> None:
        """Execute every phase; the root generator also commits and builds."""
        if self.env.root_generator is None:
            self.env.root_generator = self
        logger.debug("Running %s generator in %s", self.module_type, self.destination)

        self.initializing()
        await self.prompting()
        self.configuring()
        self.default()
        await self.writing()
        self.after_writing()

        if self.is_root:
            written = await self.env.editor.commit()
            logger.debug("Committed %d file(s)", len(written))
            await self.install()

    # -- phases ------------------------------------------------------------

    def initializing(self) -> None:
        self.lifecycle.load(self.unique_options)

    async def prompting(self) -> None:
        await self.lifecycle.prompt()

    def configuring(self) -> None:
        self.lifecycle.save()

    def default(self) -> None:
        if self.singleton:
            self.lifecycle.duplicate_check()

    async def writing(self) -> None:
        raise NotImplementedError

    def after_writing(self) -> None:
        if self.is_root:
            self.lifecycle.register_with_parent()

    async def install(self) -> None:
        await self.lifecycle.install(cwd=self.lifecycle.project_root)
