"""
.. module:: project
   :platform: Unix, Windows
   :synopsis: Hour estimates across a collection of git repositories

.. moduleauthor:: Will McGinnis <will@pedalwrencher.com>


"""

import os

from pandas import DataFrame

from githours.errors import ReferenceNotFound
from githours.logging import get_logger
from githours.repository import REMOTE_PREFIXES, Repository
from githours.result import Result

__author__ = "willmcginnis"

logger = get_logger("project")


class ProjectDirectory:
    """A class for estimating hours across several git repositories at once.

    Args:
        working_dir (Union[str, List[str], None]): The source of repositories to analyze:
            - If None: Uses current working directory to find repositories
            - If str: Path to directory containing git repositories
            - If List[str]: List of paths or URLs of git repositories, or Repository instances
        ignore_repos (Optional[List[str]]): List of repository names to ignore
        verbose (bool, optional): Whether to print verbose output. Defaults to False.
        tmp_dir (Optional[str]): Directory to clone remote repositories into. Created if not provided.

    Attributes:
        repos (List[Repository]): Repository objects being analyzed

    Raises:
        RepositoryUnreadable: If an explicitly listed repository cannot be opened

    Examples:
        >>> project = ProjectDirectory(working_dir=['/path/to/repo1', '/path/to/repo2'])
        >>> project.hours_estimate(Config()).total
        AuthorWork(name='', hours=130, commits=412)
    """

    def __init__(self, working_dir=None, ignore_repos=None, verbose=False, tmp_dir=None):
        logger.info(f"Initializing ProjectDirectory with working_dir={working_dir}, ignore_repos={ignore_repos}")
        ignore_repos = set(ignore_repos or [])

        if isinstance(working_dir, (list, tuple)):
            repo_dirs = list(working_dir)
        else:
            repo_dirs = sorted(self._discover(working_dir if working_dir is not None else os.getcwd()))

        self.repos = []
        for r in repo_dirs:
            if isinstance(r, Repository):
                if r.repo_name not in ignore_repos:
                    self.repos.append(r)
                continue
            r = str(r)
            if self._get_repo_name_from_path(r) in ignore_repos:
                logger.debug(f"Ignoring repository at {r}")
                continue
            self.repos.append(Repository(r, verbose=verbose, tmp_dir=tmp_dir))

        logger.info(f"Initialized ProjectDirectory with {len(self.repos)} repositories.")

    def _discover(self, root):
        """Finds the git repositories under a directory, without descending into them."""
        found = []
        for dirpath, dirnames, _ in os.walk(root):
            if self._is_valid_git_repo(dirpath):
                found.append(dirpath)
                dirnames[:] = []
        logger.debug(f"Discovered {len(found)} repositories under {root}")
        return found

    @staticmethod
    def _is_valid_git_repo(path):
        """Helper method to check if a path is a work tree or bare git repository.

        Args:
            path (str): Path to check

        Returns:
            bool: True if path is a git repository, False otherwise
        """
        if not os.path.isdir(path):
            return False
        if os.path.exists(os.path.join(path, ".git")):
            return True
        # bare repositories keep these directly in the repository root
        return all(os.path.exists(os.path.join(path, f)) for f in ("HEAD", "config", "objects", "refs"))

    @staticmethod
    def _get_repo_name_from_path(path):
        if path.startswith(REMOTE_PREFIXES):
            return path.rstrip("/").split("/")[-1].replace(".git", "")
        return os.path.basename(path.rstrip(os.sep))

    def repo_name(self):
        """Returns a DataFrame containing the names of all repositories in the project.

        Returns:
            pandas.DataFrame: A DataFrame with a single column:
                - repository (str): Name of each repository
        """
        return DataFrame([[x.repo_name] for x in self.repos], columns=["repository"])

    def hours_estimate(self, config):
        """Estimates hours per author across every repository and merges the results.

        Each repository is estimated on its own with the same configuration, then author entries
        with the same canonical email are added together. A repository that lacks the requested
        branch is skipped with a warning. Any other failure aborts the whole run.

        Args:
            config (githours.config.Config): The run configuration. Its ``git_path`` is ignored.

        Returns:
            githours.result.Result: The merged result
        """
        logger.info(f"Estimating hours for {len(self.repos)} repositories on '{config.branch or 'HEAD'}'.")
        results = []
        for repo in self.repos:
            try:
                results.append(repo.hours_estimate(config))
            except ReferenceNotFound as e:
                logger.warning(f"Repo: {repo} skipped: {e}")

        result = Result.merge(results)
        logger.info(f"Estimated hours: {result.total.hours} total hours over {len(results)} repositories.")
        return result

    def __len__(self):
        return len(self.repos)

    def __repr__(self):
        return f"<ProjectDirectory repos={[r.repo_name for r in self.repos]!r}>"


__all__ = ["ProjectDirectory"]
