# src/specpilot/services/github_api_service.py

"""
GitHub API service used to offer target repositories for generated code.
"""

import logging
from typing import List

import httpx
from github import Github, GithubException
from opentelemetry import trace

from specpilot.config import Settings
from specpilot.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitHubAPIService:
    """
    Service for reading the authenticated user's GitHub repositories.
    """

    def __init__(self, access_token: str, api_url: str = GITHUB_API_URL):
        """
        Initialize with GitHub access token.

        Args:
            access_token: GitHub personal access token
            api_url: REST API root, overridable for GitHub Enterprise
        """
        self.access_token = access_token
        self.api_url = api_url.rstrip("/")
        self.github = Github(access_token)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubAPIService":
        token = Settings.require(
            settings.github_access_token, "GITHUB_ACCESS_TOKEN", "GitHub access token"
        )
        return cls(token)

    @staticmethod
    def has_token(settings: Settings) -> bool:
        return bool(settings.github_access_token)

    async def list_repositories(self) -> List[dict]:
        """
        List repositories of the authenticated user, most recently updated first.

        Returns:
            List of repository dicts with id, name, full_name, private and html_url
        """
        with tracer.start_as_current_span("github.list_repositories") as span:
            headers = {
                "Authorization": f"Bearer {self.access_token}",
                "Accept": "application/vnd.github.v3+json",
            }
            params = {"sort": "updated", "per_page": 100}

            try:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.get(
                        f"{self.api_url}/user/repos", headers=headers, params=params
                    )
            except httpx.RequestError as e:
                logger.exception("Failed to reach GitHub")
                raise RemoteServiceError("GitHub API", None, str(e)) from e

            if response.status_code >= 400:
                logger.warning(f"GitHub repository listing failed: {response.status_code}")
                raise RemoteServiceError("GitHub API", response.status_code, response.text)

            result = []
            for repo in response.json():
                result.append({
                    "id": repo["id"],
                    "name": repo["name"],
                    "full_name": repo["full_name"],
                    "private": repo.get("private", False),
                    "html_url": repo.get("html_url"),
                })

            span.set_attribute("repository.count", len(result))
            logger.info(f"Listed {len(result)} repositories")
            return result

    def verify_access(self, repo_full_name: str) -> bool:
        """
        Verify that the token can read a repository.

        Args:
            repo_full_name: Repository full name (e.g., "owner/repo")

        Returns:
            True if we have access
        """
        with tracer.start_as_current_span("github.verify_access") as span:
            span.set_attribute("repository", repo_full_name)
            try:
                repo = self.github.get_repo(repo_full_name)
                _ = repo.name
                logger.info(f"Verified access to {repo_full_name}")
                return True

            except GithubException as e:
                logger.warning(f"No access to {repo_full_name}: {e}")
                return False

