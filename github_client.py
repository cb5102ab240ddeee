import logging
from urllib.parse import quote

import requests

import config

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    def __init__(self, message: str, status_code: int = None, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class GitHubClient:
    """
    Minimal GitHub REST v3 client over a requests session.

    Every non-2xx answer and every transport error is raised as GitHubError.
    """

    def __init__(self, token: str, base_url: str = None, timeout: float = None, session=None):
        self.base_url = (base_url or config.GITHUB_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def request(self, method: str, path: str, payload: dict = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise GitHubError(f"{method} {path} failed", detail=str(e)) from e

        if resp.status_code >= 400:
            raise GitHubError(
                f"{method} {path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                detail=resp.text[:500],
            )
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubError(f"{method} {path} returned invalid JSON", resp.status_code, str(e)) from e

    def repo(self, owner: str, repository: str) -> "Repository":
        return Repository(self, owner, repository)


class Repository:
    """A single owner/repository; building one makes no network call."""

    def __init__(self, client: GitHubClient, owner: str, name: str):
        self.client = client
        self.owner = owner
        self.name = name

    @property
    def path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    def get_branch(self, branch: str) -> dict:
        return self.client.request("GET", f"{self.path}/branches/{quote(branch, safe='')}")

    def branch_exists(self, branch: str) -> bool:
        try:
            self.get_branch(branch)
        except GitHubError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_ref(self, ref: str, sha: str) -> dict:
        return self.client.request("POST", f"{self.path}/git/refs", {"ref": ref, "sha": sha})

    def update_head(self, ref: str, sha: str, force: bool = False) -> dict:
        # ref is relative to refs/, e.g. "heads/unstable"; its slashes stay literal
        return self.client.request("PATCH", f"{self.path}/git/refs/{quote(ref, safe='/')}", {"sha": sha, "force": force})

    def create_release(self, options: dict) -> dict:
        return self.client.request("POST", f"{self.path}/releases", options)

    def get_release_by_tag(self, tag: str) -> dict:
        return self.client.request("GET", f"{self.path}/releases/tags/{quote(tag, safe='')}")

    def update_release(self, release_id, options: dict) -> dict:
        return self.client.request("PATCH", f"{self.path}/releases/{release_id}", options)
