"""Integration tests module generator (module type ``tests-it``)."""

from __future__ import annotations

from mvnscaffold.maven import testing_client_coordinates
from mvnscaffold.renderer import package_path

from .lifecycle import Generator, is_valid_package, validate_package
from .prompts import Question

TESTS_IT_TYPE = "tests-it"


class IntegrationTestsGenerator(Generator):
    """Generates the integration test module against the platform testing clients.

    ``publish`` adds the tests that target a publish tier.  Re-runs keep the
    properties, plugins, profiles and dependencies added to the descriptor
    by hand.
    """

    module_type = TESTS_IT_TYPE
    display_name = "Integration Tests"
    singleton = True
    unique_options = ("package", "publish")

    def initializing(self) -> None:
        props = self.lifecycle.load(self.unique_options)
        if "publish" in self.options:
            props["publish"] = bool(self.options["publish"])
        elif self.lifecycle.defaults:
            props.setdefault("publish", True)
        if "package" in props and not is_valid_package(props["package"]):
            del props["package"]
        if self.parent_props.get("groupId"):
            props.setdefault("package", self.parent_props["groupId"])

    async def prompting(self) -> None:
        await self.lifecycle.prompt([
            Question(
                "package",
                'Java Test Source Package (e.g. "com.mysite").',
                default=self.props.get("package"),
                # the parent groupId default may not be what the user wants
                when=not (self.lifecycle.defaults and "package" in self.options),
                validate=validate_package,
            ),
            Question(
                "publish",
                "Whether or not there is a Publish tier in the target AEM environments.",
                kind="confirm",
                default=True,
                when="publish" not in self.props,
            ),
        ])

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        client = await self.env.metadata.latest_release(
            testing_client_coordinates(self.parent_props.get("aemVersion"))
        )
        context = lifecycle.context(testingClient=client, packagePath=package_path(self.props["package"]))

        lifecycle.write_templates("shared", context)
        if self.props.get("publish"):
            lifecycle.write_templates("publish", context)
        lifecycle.write_descriptor(lifecycle.render_descriptor(context))
