"""
GitHub REST access.

Read-only wrapper around the three endpoints the stats pipeline needs:
- GET /user/repos                       (paginated, forks dropped)
- GET /repos/{owner}/{repo}/commits     (one page, filtered by author)
- GET /repos/{owner}/{repo}/languages   (language -> bytes)

Requests are issued one at a time. There is no retry or backoff: a failed call
raises, and callers decide whether that is fatal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import Config

logger = logging.getLogger(__name__)

USER_AGENT = "GitHub-Stats-Generator"
PAGE_SIZE = 100
REPO_AFFILIATION = "owner,collaborator,organization_member"


# -----------------------------
# Errors
# -----------------------------
class GitHubAPIError(RuntimeError):
    pass


class ApiError(GitHubAPIError):
    """Non-200 response. Keeps the status code and raw body."""

    def __init__(self, status_code: int, body: str, path: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.path = path
        super().__init__(f"GitHub API error {status_code} for {path or '?'}: {(body or '')[:600]}")


class NetworkError(GitHubAPIError):
    pass


# -----------------------------
# Records
# -----------------------------
@dataclass(frozen=True)
class Repository:
    owner: str
    name: str
    fork: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Repository":
        owner = (payload.get("owner") or {}).get("login") or ""
        if not owner and "/" in (payload.get("full_name") or ""):
            owner = payload["full_name"].split("/", 1)[0]
        return cls(owner=owner, name=payload.get("name") or "", fork=bool(payload.get("fork")))


# -----------------------------
# Client
# -----------------------------
class GitHubClient:
    def __init__(self, config: Config) -> None:
        self.config = config
        self.base_url = config.api_base.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": self.config.api_version,
            "Authorization": f"Bearer {self.config.token}",
        }

    def get(self, path: str, *, params: Optional[dict] = None) -> Any:
        """
        GET a REST resource and return the decoded JSON body.

        Raises ApiError on any status other than 200 and NetworkError when the
        request never produced a response.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = requests.request("GET", url, headers=self._headers(), params=params, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Request to {path} failed: {e}") from e

        if resp.status_code != 200:
            raise ApiError(resp.status_code, resp.text, path)

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, resp.text, path) from e

    def list_repositories(self) -> List[Repository]:
        """
        Every non-fork repository the token can see, in fetch order.

        Pages of 100 are requested until a short page comes back. A failure on
        any page propagates.
        """
        repos: List[Repository] = []
        page = 1
        while True:
            page_repos = self.get(
                "/user/repos",
                params={"per_page": PAGE_SIZE, "page": page, "affiliation": REPO_AFFILIATION},
            )
            if not isinstance(page_repos, list):
                break
            repos.extend(Repository.from_api(r) for r in page_repos if not r.get("fork"))
            logger.debug("Fetched repository page %d (%d items)", page, len(page_repos))
            if len(page_repos) < PAGE_SIZE:
                break
            page += 1
        return repos

    def list_commits(self, repo: Repository, author: str) -> List[Dict[str, Any]]:
        # Single page on purpose: at most 100 commits per repository are counted.
        data = self.get(
            f"/repos/{repo.owner}/{repo.name}/commits",
            params={"author": author, "per_page": PAGE_SIZE},
        )
        return data if isinstance(data, list) else []

    def get_languages(self, repo: Repository) -> Dict[str, int]:
        data = self.get(f"/repos/{repo.owner}/{repo.name}/languages")
        if not isinstance(data, dict):
            return {}
        return {str(k): int(v or 0) for k, v in data.items()}
