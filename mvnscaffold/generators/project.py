"""Project (root) generator, recorded under the ``project`` sidecar tag.

Writes the root descriptor, then composes one generator per requested module
in composition order.  The root descriptor is written first so composed
modules can discover their siblings through its module list.  Every file is
committed once all modules succeeded, and the build runs once, from the
project root.

Modules are requested as a ``{directory: module type}`` mapping or a list of
module types generated into their default directories.  Without a request,
a re-run regenerates the modules already in the project and a fresh project
gets every module type.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from mvnscaffold.errors import ConflictError, InvalidInputError
from mvnscaffold.maven import AEM_VERSIONS, api_coordinates, drop_other_platform_api
from mvnscaffold.pom.reader import read_pom_properties
from mvnscaffold.pom.tree import find_section
from mvnscaffold.state.discovery import list_parent_modules
from mvnscaffold.state.sidecar import PROJECT_TYPE, Sidecar

from .lifecycle import PARENT_PROPERTIES, SHARED_OPTIONS, Generator, validate_artifact_id
from .prompts import Question, required
from .registry import DEFAULT_MODULES, GENERATORS, composition_order

logger = logging.getLogger(__name__)

ROOT_OPTIONS = ("groupId", "version", "javaVersion", "aemVersion")
JAVA_VERSIONS = ("8", "11")
DEFAULT_VERSION = "1.0.0-SNAPSHOT"

_INVALID_GROUP_ID = re.compile(r"[^a-zA-Z.]")


def validate_group_id(value: Any) -> str | None:
    if not value:
        return "GroupId must be provided."
    if _INVALID_GROUP_ID.search(str(value)):
        return "GroupId must only contain letters or periods (.)."
    return None


class ProjectGenerator(Generator):
    """Root generator of a multi-module project."""

    module_type = PROJECT_TYPE
    display_name = "Project"

    # -- initializing ------------------------------------------------------

    def initializing(self) -> None:
        props = {key: self.options[key] for key in (*SHARED_OPTIONS, *ROOT_OPTIONS) if key in self.options}
        for key in ("javaVersion", "aemVersion"):
            if key in props:
                props[key] = str(props[key])
        if props.get("javaVersion") not in JAVA_VERSIONS:
            props.pop("javaVersion", None)
        if props.get("aemVersion") not in AEM_VERSIONS:
            props.pop("aemVersion", None)

        self.validate_destination()
        self._load_existing(props)
        if self.lifecycle.defaults:
            props.setdefault("version", DEFAULT_VERSION)
            props.setdefault("aemVersion", "cloud")
            props.setdefault("javaVersion", "11")
            props.setdefault("examples", False)

        self.lifecycle.props = props
        self.lifecycle.parent_props = {}
        self.modules = self._resolve_modules()

    def _load_existing(self, props: dict[str, Any]) -> None:
        editor = self.env.editor
        stored = Sidecar(editor, self.destination).get(PROJECT_TYPE) or {}
        for key, value in stored.items():
            props.setdefault(key, value)

        pom = read_pom_properties(editor, self.destination)
        for key in ("groupId", "artifactId", "version", "name"):
            if key in pom:
                props.setdefault(key, pom[key])
        java_version = pom.get("pomProperties", {}).get("java.version")
        if java_version in JAVA_VERSIONS:
            props.setdefault("javaVersion", java_version)

    def _resolve_modules(self) -> dict[str, str]:
        requested = self.options.get("modules")
        if requested is None:
            return composition_order(self._existing_modules() or DEFAULT_MODULES)

        if isinstance(requested, dict):
            modules = dict(requested)
        else:
            directories = {module_type: directory for directory, module_type in DEFAULT_MODULES.items()}
            modules = {}
            for module_type in requested:
                if module_type not in directories:
                    raise InvalidInputError(f"Unknown module type '{module_type}'.")
                modules[directories[module_type]] = module_type

        for module_type in modules.values():
            if module_type not in GENERATORS:
                raise InvalidInputError(f"Unknown module type '{module_type}'.")
        return composition_order(modules)

    def _existing_modules(self) -> dict[str, str]:
        editor = self.env.editor
        modules: dict[str, str] = {}
        for directory in list_parent_modules(editor, self.destination):
            recorded = Sidecar(editor, self.destination / directory).recorded_module_types() & set(GENERATORS)
            if len(recorded) == 1:
                modules[directory] = recorded.pop()
        return modules

    # -- prompting ---------------------------------------------------------

    async def prompting(self) -> None:
        props = self.props
        defaults = self.lifecycle.defaults
        prompter = self.env.prompter

        props.update(await prompter.ask([
            Question(
                "groupId",
                'What is the Maven Group ID? (e.g. "com.mysite")',
                when="groupId" not in props,
                validate=validate_group_id,
            ),
            Question(
                "name",
                'What is the project name? (e.g. "My Site")',
                when="name" not in props,
                validate=required("Name"),
            ),
            Question(
                "appId",
                'What is the app\'s technical name? (e.g. "mysite")',
                when="appId" not in props,
                validate=required("AppId"),
            ),
            Question(
                "examples",
                "Include any examples in generated projects?",
                kind="confirm",
                default=False,
                when=not defaults and "examples" not in props,
            ),
            Question(
                "aemVersion",
                "Which version of AEM are you using?",
                kind="choice",
                choices=list(AEM_VERSIONS),
                default="cloud",
                when=not defaults and "aemVersion" not in props,
            ),
        ]))

        props.update(await prompter.ask([
            Question(
                "artifactId",
                'What is the Maven Artifact ID? (e.g. "mysite")',
                default=props.get("appId"),
                when=not defaults and "artifactId" not in props,
                validate=validate_artifact_id,
            ),
            Question(
                "version",
                "What is the starting version for the project? (e.g. 1.0.0-SNAPSHOT)",
                default=DEFAULT_VERSION,
                when=not defaults and "version" not in props,
                validate=required("Version"),
            ),
            Question(
                "javaVersion",
                "Which version of Java do you want to use?",
                kind="choice",
                choices=list(JAVA_VERSIONS),
                default="11",
                when=not defaults and "javaVersion" not in props and props.get("aemVersion") != "cloud",
            ),
        ]))

        props.setdefault("artifactId", props["appId"])
        props.setdefault("version", DEFAULT_VERSION)
        props.setdefault("aemVersion", "cloud")
        props.setdefault("examples", False)
        if props["aemVersion"] == "cloud":
            props["javaVersion"] = "11"
        props.setdefault("javaVersion", "11")

    # -- configuring -------------------------------------------------------

    def configuring(self) -> None:
        if "generateInto" not in self.options and self.destination.name != self.props["appId"]:
            self.destination = self.lifecycle.destination = self.destination / self.props["appId"]
            logger.debug("Generating project into %s", self.destination)
            self.validate_destination()
        self.validate_coordinates()
        self.lifecycle.save()

    def validate_destination(self) -> None:
        """Refuse to generate the project over an existing module directory.

        Raises:
            ConflictError: If the destination sidecar records a module type.
        """
        recorded = Sidecar(self.env.editor, self.destination).recorded_module_types()
        if recorded:
            raise ConflictError(
                f"Refusing to create Project in a {sorted(recorded)[0]} module directory."
            )

    def validate_coordinates(self) -> None:
        """Refuse to regenerate a project under different coordinates.

        Raises:
            ConflictError: If the existing root descriptor declares another
                groupId or artifactId.
        """
        existing = read_pom_properties(self.env.editor, self.destination)
        if "artifactId" not in existing:
            return
        if existing.get("groupId") != self.props["groupId"] or existing["artifactId"] != self.props["artifactId"]:
            raise ConflictError("Refusing to update existing project with different group/artifact identifiers.")

    # -- writing -----------------------------------------------------------

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        props = self.props
        aem = await self.env.metadata.latest_release(api_coordinates(props["aemVersion"]))
        context = lifecycle.context(aem=aem, api=aem, modules=list(self.modules))

        lifecycle.write_templates("shared", context)
        lifecycle.write_descriptor(
            lifecycle.render_descriptor(context),
            finalize=lambda project: drop_other_platform_api(
                find_section(project, "dependencyManagement", "dependencies"), props["aemVersion"]
            ),
        )

        parent = {key: props[key] for key in PARENT_PROPERTIES if key in props}
        module_options = self.options.get("moduleOptions") or {}
        for directory, module_type in self.modules.items():
            options = {
                "generateInto": str(self.destination / directory),
                "parent": parent,
                "defaults": self.options.get("defaults"),
                "examples": props.get("examples"),
                **module_options.get(directory, {}),
            }
            logger.debug("Composing %s module in %s", module_type, directory)
            await GENERATORS[module_type](self.env, options).run()

    def after_writing(self) -> None:
        pass

    async def install(self) -> None:
        await self.lifecycle.install(cwd=self.destination)
