"""Module generators by type tag, in composition order.

A project composes its modules in this order so every module can discover
the siblings it depends on (apps after bundles and structure, content after
config, the aggregate package after every packaged module).
"""

from __future__ import annotations

from .bundle import BUNDLE_TYPE, BundleGenerator
from .lifecycle import Generator
from .package_all import ALL_TYPE, AllPackageGenerator
from .package_apps import APPS_TYPE, AppsPackageGenerator
from .package_config import CONFIG_TYPE, CONTENT_TYPE, ConfigPackageGenerator
from .package_content import ContentPackageGenerator
from .package_structure import STRUCTURE_TYPE, StructurePackageGenerator
from .tests_it import TESTS_IT_TYPE, IntegrationTestsGenerator

GENERATORS: dict[str, type[Generator]] = {
    BUNDLE_TYPE: BundleGenerator,
    STRUCTURE_TYPE: StructurePackageGenerator,
    APPS_TYPE: AppsPackageGenerator,
    CONFIG_TYPE: ConfigPackageGenerator,
    CONTENT_TYPE: ContentPackageGenerator,
    ALL_TYPE: AllPackageGenerator,
    TESTS_IT_TYPE: IntegrationTestsGenerator,
}

# Directory each module type is generated into when none is given.
DEFAULT_MODULES: dict[str, str] = {
    "core": BUNDLE_TYPE,
    "ui.apps.structure": STRUCTURE_TYPE,
    "ui.apps": APPS_TYPE,
    "ui.config": CONFIG_TYPE,
    "ui.content": CONTENT_TYPE,
    "all": ALL_TYPE,
    "it.tests": TESTS_IT_TYPE,
}

SINGLETON_TYPES = frozenset(t for t, cls in GENERATORS.items() if cls.singleton)


def composition_order(modules: dict[str, str]) -> dict[str, str]:
    """Sort a ``{directory: module type}`` mapping into composition order."""
    order = list(GENERATORS)
    return dict(sorted(modules.items(), key=lambda item: order.index(item[1])))
