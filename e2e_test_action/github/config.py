"""Configuration for the GitHub API client."""

from pydantic import BaseModel, SecretStr


class GitHubConfig(BaseModel):
    """Configuration for the GitHub API client."""

    token: SecretStr
    api_base_url: str = "https://api.github.com"
    timeout: float = 5
