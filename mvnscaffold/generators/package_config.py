"""OSGi configuration package generator (module type ``package-config``).

One per project.  Besides its descriptor it writes a log configuration for
every bundle module and the publish-tier resource resolver mapping covering
every content package known when it runs.  Content packages generated later
add their own RepoInit configuration and resolver mapping to this module.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .bundle import BUNDLE_TYPE
from .lifecycle import Generator, ModuleLifecycle
from .package_structure import STRUCTURE_TYPE

CONFIG_TYPE = "package-config"
CONTENT_TYPE = "package-content"

RESOLVER_CONFIG = "org.apache.sling.jcr.resource.internal.JcrResourceResolverFactoryImpl.cfg.json"


ROOT_MAPPING = "/:/"


def resolver_mappings(contents: list[dict[str, Any]]) -> list[str]:
    """Publish resolver mappings: one per content package plus the root."""
    mappings = [f"/content/{content['appId']}/</" for content in contents if content.get("appId")]
    mappings.append(ROOT_MAPPING)
    return mappings


def resolver_config_path(directory: Path, app_id: str) -> Path:
    return directory / "src/main/content/jcr_root/apps" / app_id / "osgiconfig/config.publish" / RESOLVER_CONFIG


def register_resolver_mapping(lifecycle: ModuleLifecycle, config: dict[str, Any], app_id: str) -> None:
    """Add the mapping for content *app_id* to the resolver config of module *config*.

    The mapping goes before the root mapping, which must stay last.
    """
    path = resolver_config_path(lifecycle.project_root / config["path"], config.get("appId", app_id))
    data = lifecycle.editor.read_json(path, {"resource.resolver.mapping": [ROOT_MAPPING]})
    mappings = list(data.get("resource.resolver.mapping") or [])
    entry = f"/content/{app_id}/</"
    if entry in mappings:
        return
    if ROOT_MAPPING in mappings:
        mappings.insert(mappings.index(ROOT_MAPPING), entry)
    else:
        mappings.append(entry)
    data["resource.resolver.mapping"] = mappings
    lifecycle.editor.write_json(path, data)


class ConfigPackageGenerator(Generator):
    module_type = CONFIG_TYPE
    display_name = "Config Package"
    singleton = True

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        app_id = self.props["appId"]
        bundles = lifecycle.find_modules(BUNDLE_TYPE)
        contents = lifecycle.find_modules(CONTENT_TYPE)

        app_ids = [app_id]
        for module in (*bundles, *contents):
            if module.get("appId") and module["appId"] not in app_ids:
                app_ids.append(module["appId"])

        structures = lifecycle.find_modules(STRUCTURE_TYPE)
        context = lifecycle.context(appIds=app_ids, structure=structures[0] if structures else None)
        lifecycle.write_templates("shared", context)

        lifecycle.editor.write_json(
            resolver_config_path(self.destination, app_id),
            {"resource.resolver.mapping": resolver_mappings(contents)},
        )
        for bundle in bundles:
            if bundle.get("package"):
                lifecycle.write_templates(
                    "loggers",
                    lifecycle.context(appId=bundle.get("appId", app_id), loggerPackage=bundle["package"]),
                )

        lifecycle.write_descriptor(lifecycle.render_descriptor(context))
