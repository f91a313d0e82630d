"""GitHub API client module."""

from e2e_test_action.github.client import GitHubAPIError, GitHubClient
from e2e_test_action.github.config import GitHubConfig
from e2e_test_action.github.models import Commit, GitHubUser

__all__ = ["Commit", "GitHubAPIError", "GitHubClient", "GitHubConfig", "GitHubUser"]
