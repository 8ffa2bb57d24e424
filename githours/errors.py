"""
.. module:: errors
   :platform: Unix, Windows
   :synopsis: Exceptions raised by githours. All of them are fatal for an analysis run.

"""

__author__ = "willmcginnis"


class GitHoursError(Exception):
    """Base exception for every githours failure."""

    pass


class ConfigurationError(GitHoursError, ValueError):
    """Raised when a run configuration value is malformed, e.g. an unknown date token."""

    pass


class RepositoryUnreadable(GitHoursError):
    """Raised when the repository cannot be opened or traversed, including shallow clones."""

    pass


class ShallowClone(RepositoryUnreadable):
    """Raised when the repository is a shallow clone, whose truncated history cannot be estimated."""

    pass


class ReferenceNotFound(GitHoursError):
    """Raised when the requested branch, or the default HEAD, cannot be resolved."""

    pass


__all__ = ["GitHoursError", "ConfigurationError", "RepositoryUnreadable", "ShallowClone", "ReferenceNotFound"]
