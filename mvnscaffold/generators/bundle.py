"""Java OSGi bundle module generator (module type ``bundle``)."""

from __future__ import annotations

from mvnscaffold.maven import drop_other_platform_api
from mvnscaffold.pom.tree import find_section
from mvnscaffold.renderer import package_path

from .lifecycle import Generator, is_valid_package, validate_package
from .prompts import Question

BUNDLE_TYPE = "bundle"


class BundleGenerator(Generator):
    """Generates a Java bundle: descriptor, bnd instructions and package skeleton.

    The source package defaults to the parent project's groupId.
    """

    module_type = BUNDLE_TYPE
    display_name = "Bundle"
    unique_options = ("package",)

    def initializing(self) -> None:
        props = self.lifecycle.load(self.unique_options)
        if "package" in props and not is_valid_package(props["package"]):
            del props["package"]
        if self.parent_props.get("groupId"):
            props.setdefault("package", self.parent_props["groupId"])

    async def prompting(self) -> None:
        await self.lifecycle.prompt([
            Question(
                "package",
                'Java Source Package (e.g. "com.mysite").',
                default=self.props.get("package"),
                when=not (self.lifecycle.defaults and self.props.get("package")),
                validate=validate_package,
            ),
        ])

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        context = lifecycle.context(packagePath=package_path(self.props["package"]))

        lifecycle.write_templates("shared", context)
        if self.props.get("examples"):
            lifecycle.write_templates("examples", context)
        lifecycle.write_descriptor(
            lifecycle.render_descriptor(context),
            finalize=lambda project: drop_other_platform_api(
                find_section(project, "dependencies"), self.parent_props.get("aemVersion")
            ),
        )
