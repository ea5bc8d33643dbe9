"""Exception hierarchy for cargo-jump.

Configuration, workspace and git errors are raised before any manifest is
touched. WriteError is raised per package by the manifest writer and is
collected into the run report instead of aborting the run.
"""

from __future__ import annotations


class CargoJumpError(Exception):
    """Base class for all cargo-jump errors."""


class ConfigurationError(CargoJumpError):
    """The workspace or the run configuration is unusable."""


class DuplicateName(ConfigurationError):
    """Two workspace packages share a name."""


class AmbiguousRoot(ConfigurationError):
    """Two package roots overlap so path ownership is ambiguous."""


class UnknownDependency(ConfigurationError):
    """A package depends on a name that is not a workspace member."""


class DependencyCycle(ConfigurationError):
    """The intra-workspace dependency relation contains a cycle."""


class InvalidVersion(ConfigurationError):
    """The requested version is not valid for the workspace's ecosystem."""


class WorkspaceError(CargoJumpError):
    """The workspace metadata could not be read."""


class WorkspaceNotFound(WorkspaceError):
    """No supported workspace manifest exists at the given root."""


class ManifestParseError(WorkspaceError):
    """A manifest or the workspace metadata could not be parsed."""


class GitError(CargoJumpError):
    """Source control could not produce the list of changed files."""


class RefNotFound(GitError):
    """The old release reference does not resolve to a commit."""


class RepositoryError(GitError):
    """Any other git failure."""


class WriteError(CargoJumpError):
    """A manifest (or the lockfile) could not be updated."""
