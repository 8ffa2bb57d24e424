from importlib.metadata import version

from githours.config import Config, MergeDetection, parse_date_input
from githours.errors import ConfigurationError, GitHoursError, ReferenceNotFound, RepositoryUnreadable, ShallowClone
from githours.estimator import estimate_hours, session_breakdown
from githours.filter import AuthorLedger, build_ledger
from githours.project import ProjectDirectory
from githours.repository import CommitRecord, Repository
from githours.result import AuthorWork, Result, aggregate

__version__ = version("githours")

__author__ = "willmcginnis"

__all__ = [
    "AuthorLedger",
    "AuthorWork",
    "CommitRecord",
    "Config",
    "ConfigurationError",
    "GitHoursError",
    "MergeDetection",
    "ProjectDirectory",
    "ReferenceNotFound",
    "Repository",
    "RepositoryUnreadable",
    "Result",
    "ShallowClone",
    "aggregate",
    "build_ledger",
    "estimate_hours",
    "parse_date_input",
    "session_breakdown",
]
