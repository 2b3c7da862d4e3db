"""Content package generator (module type ``package-content``).

Content folders are created through RepoInit, so the project must hold a
config package first; the RepoInit configuration and publish resolver mapping
for this content's appId are written into that config module.  Page templates
reference components from an apps package (``appsRef``, an apps module
artifactId), auto-selected when the project holds exactly one.
"""

from __future__ import annotations

from typing import Any

from mvnscaffold.errors import DependencyPreconditionError

from .lifecycle import Generator
from .package_apps import APPS_TYPE
from .package_config import CONFIG_TYPE, CONTENT_TYPE, register_resolver_mapping
from .package_structure import register_filter_roots
from .prompts import Question


class ContentPackageGenerator(Generator):
    module_type = CONTENT_TYPE
    display_name = "Content Package"
    unique_options = ("templates", "appsRef", "singleCountry", "language", "country", "enableDynamicMedia")

    def initializing(self) -> None:
        props = self.lifecycle.load(self.unique_options)
        if self.lifecycle.defaults:
            props.setdefault("templates", True)
            props.setdefault("singleCountry", True)
            props.setdefault("language", "en")
            props.setdefault("country", "us")
            props.setdefault("enableDynamicMedia", False)

        self.available_apps = self.lifecycle.find_modules(APPS_TYPE)
        if "appsRef" not in props and len(self.available_apps) == 1:
            props["appsRef"] = self.available_apps[0].get("artifactId")

    async def prompting(self) -> None:
        props = self.props
        defaults = self.lifecycle.defaults
        examples = bool(props.get("examples"))
        await self.lifecycle.prompt([
            Question(
                "templates",
                "Do you want to include the default templates?",
                kind="confirm",
                default=True,
                when=not defaults and not examples and "templates" not in props,
            ),
            Question(
                "appsRef",
                "Which Apps package contains the components for rendering this package's content?",
                kind="choice",
                choices=[app["artifactId"] for app in self.available_apps if app.get("artifactId")],
                when="appsRef" not in props and len(self.available_apps) > 0,
            ),
            Question(
                "singleCountry",
                "Should only one country structure be created?",
                kind="confirm",
                default=True,
                when=not defaults and "singleCountry" not in props,
            ),
            Question(
                "language",
                "What is the ISO language code for the initial site structure?",
                default="en",
                when=not defaults and "language" not in props,
            ),
            Question(
                "country",
                "What is the ISO country code for the initial site structure?",
                default="us",
                when=not defaults and "country" not in props,
            ),
            Question(
                "enableDynamicMedia",
                "Should Dynamic Media features be enabled?",
                kind="confirm",
                default=False,
                when=not defaults and "enableDynamicMedia" not in props,
            ),
        ])
        if props.get("examples"):
            props["templates"] = True

    def default(self) -> None:
        super().default()
        if not self.lifecycle.find_modules(CONFIG_TYPE):
            raise DependencyPreconditionError(
                "Unable to create Content Package, no Config Module found. (Required for folder creation via RepoInit.)"
            )
        apps_ref = self.props.get("appsRef")
        if self.props.get("templates") and not apps_ref:
            raise DependencyPreconditionError(
                "Unable to create Content Package, Apps Package module not specified. (Required for templates to reference.)"
            )
        if apps_ref and self._apps(apps_ref) is None:
            raise DependencyPreconditionError(
                f"Unable to create Content Package, Apps Package '{apps_ref}' not found in the project."
            )

    def _apps(self, artifact_id: str) -> dict[str, Any] | None:
        return self.lifecycle.find_module(APPS_TYPE, artifact_id)

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        props = self.props
        apps_ref = props.get("appsRef")
        context = lifecycle.context(
            apps=self._apps(apps_ref) if apps_ref else None,
            language=props.get("language", "en"),
            country=props.get("country", "us"),
        )

        lifecycle.write_templates("shared", context)
        if props.get("templates"):
            lifecycle.write_templates("templates", context)
        if props.get("examples"):
            lifecycle.write_templates("examples/single" if props.get("singleCountry", True) else "examples/multi", context)
        lifecycle.write_descriptor(lifecycle.render_descriptor(context))

        config = lifecycle.find_modules(CONFIG_TYPE)[0]
        lifecycle.write_templates("repoinit", context, directory=lifecycle.project_root / config["path"])
        register_resolver_mapping(lifecycle, config, props["appId"])
        register_filter_roots(lifecycle, [f"/content/dam/{props['appId']}"])
