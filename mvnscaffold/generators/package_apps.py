"""Apps (code) package generator (module type ``package-apps``).

The apps package optionally depends on one bundle module of the project
(``bundleRef``, a module directory name).  When the project holds exactly one
bundle and no reference was given, that bundle is selected automatically.

The platform API dependency follows the parent's target version: a cloud
project must not carry the ``uber-jar`` (it is removed even when an earlier
run left it in the descriptor), while a 6.5 project gets it with the latest
released version.
"""

from __future__ import annotations

from typing import Any

from mvnscaffold.errors import DependencyPreconditionError
from mvnscaffold.maven import api_coordinates
from mvnscaffold.pom.merge import Coordinates, ensure_section, merge_dependencies, remove_dependencies
from mvnscaffold.pom.tree import Node
from mvnscaffold.utils import print_warning

from .bundle import BUNDLE_TYPE
from .lifecycle import Generator
from .package_structure import STRUCTURE_TYPE, register_filter_roots
from .prompts import Question

APPS_TYPE = "package-apps"


class AppsPackageGenerator(Generator):
    module_type = APPS_TYPE
    display_name = "Apps Package"
    unique_options = ("bundleRef", "precompileScripts")

    def initializing(self) -> None:
        props = self.lifecycle.load(self.unique_options)
        self.bundles = self.lifecycle.find_modules(BUNDLE_TYPE)
        if "bundleRef" not in props and len(self.bundles) == 1:
            props["bundleRef"] = self.bundles[0]["path"]

    async def prompting(self) -> None:
        props = self.props
        if self.lifecycle.defaults and "bundleRef" not in props and len(self.bundles) > 1:
            print_warning(
                f"{len(self.bundles)} bundle modules found, none selected for {self.destination.name}. "
                "Pass bundleRef to depend on one."
            )
        await self.lifecycle.prompt([
            Question(
                "bundleRef",
                "Module name of optional dependency on OSGi bundle. (e.g. core)",
                kind="choice",
                choices=[bundle["path"] for bundle in self.bundles],
                when=not self.lifecycle.defaults and "bundleRef" not in props and len(self.bundles) > 0,
            ),
            Question(
                "precompileScripts",
                "Whether or not to precompile HTL scripts.",
                kind="confirm",
                default=True,
                when="precompileScripts" not in props,
            ),
        ])

    def default(self) -> None:
        super().default()
        ref = self.props.get("bundleRef")
        if ref and self._bundle(ref) is None:
            raise DependencyPreconditionError(
                f"Unable to create Apps Package, bundle module '{ref}' not found in the project."
            )

    def _bundle(self, ref: str) -> dict[str, Any] | None:
        return next((bundle for bundle in self.bundles if bundle["path"] == ref), None)

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        cloud = self.parent_props.get("aemVersion") == "cloud"
        uber_jar = None if cloud else await lifecycle.latest_api()

        structures = lifecycle.find_modules(STRUCTURE_TYPE)
        context = lifecycle.context(
            bundle=self._bundle(self.props["bundleRef"]) if self.props.get("bundleRef") else None,
            structure=structures[0] if structures else None,
            cloud=cloud,
        )

        lifecycle.write_templates("shared", context)
        if self.props.get("examples"):
            lifecycle.write_templates("examples", context)
        lifecycle.write_descriptor(
            lifecycle.render_descriptor(context),
            finalize=lambda project: switch_platform_api(project, cloud, uber_jar),
        )
        register_filter_roots(lifecycle, [f"/apps/{self.props['appId']}"])


def switch_platform_api(project: list[Node], cloud: bool, uber_jar: Coordinates | None) -> None:
    """Keep exactly the platform API dependency matching the target version."""
    dependencies = ensure_section(project, "dependencies")
    sdk = api_coordinates("cloud").to_dependency()
    legacy = api_coordinates("6.5").to_dependency(scope="provided")
    if cloud:
        remove_dependencies(dependencies, [legacy])
        return
    remove_dependencies(dependencies, [sdk])
    merge_dependencies(dependencies, [legacy], override=uber_jar)
