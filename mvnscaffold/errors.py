"""Exception hierarchy for mvnscaffold.

Every fatal condition raised by a generator derives from ``ScaffoldError`` so
the CLI can report it uniformly.  Errors are raised before any file is
written whenever the condition can be detected up front.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for all generation failures."""


class ContextError(ScaffoldError):
    """Required ambient state (parent project, destination) is missing."""


class ConflictError(ScaffoldError):
    """The requested generation conflicts with what already exists on disk."""


class DependencyPreconditionError(ScaffoldError):
    """A sibling module required by the requested module is absent."""


class ExternalCallError(ScaffoldError):
    """An external call (network lookup, build tool) failed."""


class MetadataLookupError(ExternalCallError):
    """Artifact repository metadata could not be fetched or parsed."""


class BuildError(ExternalCallError):
    """The external build tool exited with a non-zero status."""

    def __init__(self, returncode: int, message: str) -> None:
        self.returncode = returncode
        super().__init__(
            f"Maven build failed with error: \n\n\t{message}\n\n"
            "Please retry the build manually to determine the issue."
        )


class InvalidInputError(ScaffoldError):
    """A required answer is missing or fails validation."""
