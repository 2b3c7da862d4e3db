"""Project and module generators."""

from .lifecycle import Environment, Generator, ModuleLifecycle
from .project import ProjectGenerator
from .prompts import Question, RichPrompter, StaticPrompter
from .registry import DEFAULT_MODULES, GENERATORS, SINGLETON_TYPES

__all__ = [
    "DEFAULT_MODULES",
    "Environment",
    "GENERATORS",
    "Generator",
    "ModuleLifecycle",
    "ProjectGenerator",
    "Question",
    "RichPrompter",
    "SINGLETON_TYPES",
    "StaticPrompter",
]
