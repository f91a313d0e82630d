"""Pydantic models for GitHub REST API responses."""

from pydantic import BaseModel


class GitHubUser(BaseModel):
    """A GitHub account linked to a commit."""

    login: str


class Commit(BaseModel):
    """A commit from the GitHub commits API.

    ``author`` and ``committer`` are null when the git identity is not linked
    to a GitHub account.
    """

    sha: str
    author: GitHubUser | None = None
    committer: GitHubUser | None = None
