"""mvnscaffold - scaffolding for multi-module Maven projects.

Generates a project root and its modules (bundles, content packages,
integration tests) from templates, and re-runs against existing projects by
merging into the descriptors already on disk.
"""

__version__ = "0.1.0"
