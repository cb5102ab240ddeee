import logging
from dataclasses import dataclass

import config
from github_client import GitHubError
from parameters import NO_PREVIOUS_RELEASE, OperationParameters

logger = logging.getLogger(__name__)

RELEASE_CREATED = "GitHub Release Created"
RELEASE_CREATION_FAILED = "GitHub Release Creation Failed"
BRANCH_CREATED = "GitHub Branch Created"
BRANCH_CREATION_FAILED = "GitHub Branch Creation Failed"
BRANCH_UPDATED = "GitHub Branch Updated"
BRANCH_UPDATE_FAILED = "GitHub Branch Update Failed"
RELEASE_UPDATED = "GitHub Release Updated"
RELEASE_UPDATE_FAILED = "GitHub Release Update Failed"
RELEASE_LOOKUP_FAILED = "Failed to retrieve GitHub Release information."


@dataclass
class OperationResult:
    """
    Outcome of one GitHub operation.

    `message` is the fixed text CodePipeline sees; `detail` keeps the
    underlying error for the logs only.
    """

    ok: bool
    message: str
    detail: str = ""

    @classmethod
    def success(cls, message: str) -> "OperationResult":
        return cls(True, message)

    @classmethod
    def failure(cls, message: str, error: Exception = None) -> "OperationResult":
        detail = ""
        if error is not None:
            detail = str(error)
            extra = getattr(error, "detail", "")
            if extra:
                detail = f"{detail}: {extra}"
        return cls(False, message, detail)


def build_release_body(owner: str, repository: str, current: str, previous: str, web_url: str = None) -> str:
    if previous == NO_PREVIOUS_RELEASE:
        return "(Initial Release)"
    web_url = (web_url or config.GITHUB_WEB_URL).rstrip("/")
    return f"[ [Release Changelog]({web_url}/{owner}/{repository}/compare/{previous}...{current}) ]"


def create_release(repo, params: OperationParameters) -> OperationResult:
    options = {
        "tag_name": params.current_release,
        "target_commitish": params.commit,
        "name": params.current_release,
        "body": build_release_body(params.owner, params.repository, params.current_release, params.prev_release),
        "draft": False,
        "prerelease": params.prerelease,
    }
    try:
        repo.create_release(options)
    except GitHubError as e:
        return OperationResult.failure(RELEASE_CREATION_FAILED, e)
    return OperationResult.success(RELEASE_CREATED)


def _create_branch(repo, branch: str, sha: str) -> OperationResult:
    try:
        repo.create_ref(f"refs/heads/{branch}", sha)
    except GitHubError as e:
        return OperationResult.failure(BRANCH_CREATION_FAILED, e)
    return OperationResult.success(BRANCH_CREATED)


def _update_branch(repo, branch: str, sha: str) -> OperationResult:
    try:
        repo.update_head(f"heads/{branch}", sha, force=True)
    except GitHubError as e:
        return OperationResult.failure(BRANCH_UPDATE_FAILED, e)
    return OperationResult.success(BRANCH_UPDATED)


def create_unstable_branch(repo, params: OperationParameters) -> OperationResult:
    branch = params.unstable_branch
    try:
        exists = repo.branch_exists(branch)
    except GitHubError as e:
        # an unreadable branch is treated as missing; the create call decides
        logger.warning(f"Could not probe branch {branch}: {e}")
        exists = False

    if exists:
        logger.info(f"Branch {branch} already exists, moving it to {params.commit}")
        return _update_branch(repo, branch, params.commit)
    logger.info(f"Branch {branch} doesn't exist, creating it at {params.commit}")
    return _create_branch(repo, branch, params.commit)


def update_release(repo, params: OperationParameters) -> OperationResult:
    try:
        release = repo.get_release_by_tag(params.current_release)
        release_id = release["id"]
    except (GitHubError, KeyError, TypeError) as e:
        return OperationResult.failure(RELEASE_LOOKUP_FAILED, e)

    try:
        repo.update_release(release_id, {"prerelease": params.prerelease})
    except GitHubError as e:
        return OperationResult.failure(RELEASE_UPDATE_FAILED, e)
    return OperationResult.success(RELEASE_UPDATED)
