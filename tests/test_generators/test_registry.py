"""Tests for the generator registry (mvnscaffold.generators.registry)."""

from __future__ import annotations

import pytest

from mvnscaffold.generators.registry import DEFAULT_MODULES, GENERATORS, SINGLETON_TYPES, composition_order


@pytest.mark.unit
class TestRegistry:
    def test_generator_types(self):
        for module_type, generator in GENERATORS.items():
            assert generator.module_type == module_type

    def test_singletons(self):
        assert SINGLETON_TYPES == {"package-structure", "package-config", "package-all", "tests-it"}

    def test_default_directories(self):
        assert DEFAULT_MODULES == {
            "core": "bundle",
            "ui.apps.structure": "package-structure",
            "ui.apps": "package-apps",
            "ui.config": "package-config",
            "ui.content": "package-content",
            "all": "package-all",
            "it.tests": "tests-it",
        }

    def test_composition_order(self):
        modules = {
            "it.tests": "tests-it",
            "all": "package-all",
            "ui.content": "package-content",
            "ui.apps": "package-apps",
            "extra": "bundle",
            "ui.config": "package-config",
            "core": "bundle",
        }
        assert list(composition_order(modules)) == [
            "extra", "core", "ui.apps", "ui.config", "ui.content", "all", "it.tests",
        ]
