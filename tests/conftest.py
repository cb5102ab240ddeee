"""
Pytest configuration and shared fixtures.
"""

import json
import os

# boto3 clients are created at import time; give them a region and dummy keys
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("SECRET_TOKEN_ARN", "arn:aws:secretsmanager:us-east-1:123456789012:secret:github-token")

import pytest

import credentials
from github_client import GitHubError

JOB_ID = "11111111-2222-3333-4444-555555555555"
REQUEST_ID = "aws-request-0001"
SECRET_ARN = os.environ["SECRET_TOKEN_ARN"]


class FakeContext:
    aws_request_id = REQUEST_ID


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        if text is None:
            text = json.dumps(data) if data is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session; answers are queued per call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout})
        answer = self.responses.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeRepo:
    """Records GitHub calls; `fail` maps a method name to the error it raises."""

    def __init__(self, branches=None, releases=None, fail=None):
        self.branches = dict(branches or {})
        self.releases = dict(releases or {})
        self.fail = dict(fail or {})
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def branch_exists(self, branch):
        self._record("branch_exists", branch)
        return branch in self.branches

    def create_ref(self, ref, sha):
        self._record("create_ref", ref, sha)
        self.branches[ref[len("refs/heads/"):]] = sha
        return {"ref": ref, "object": {"sha": sha}}

    def update_head(self, ref, sha, force=False):
        self._record("update_head", ref, sha, force)
        self.branches[ref[len("heads/"):]] = sha
        return {"ref": f"refs/{ref}", "object": {"sha": sha}}

    def create_release(self, options):
        self._record("create_release", options)
        release = dict(options, id=len(self.releases) + 1)
        self.releases[options["tag_name"]] = release
        return release

    def get_release_by_tag(self, tag):
        self._record("get_release_by_tag", tag)
        if tag not in self.releases:
            raise GitHubError(f"GET /releases/tags/{tag} returned HTTP 404", status_code=404, detail="Not Found")
        return self.releases[tag]

    def update_release(self, release_id, options):
        self._record("update_release", release_id, options)
        for release in self.releases.values():
            if release["id"] == release_id:
                release.update(options)
                return release
        raise GitHubError("PATCH release returned HTTP 404", status_code=404)

    @property
    def call_names(self):
        return [c[0] for c in self.calls]


def make_event(user_parameters, job_id=JOB_ID):
    if isinstance(user_parameters, dict):
        user_parameters = json.dumps(user_parameters)
    return {
        "CodePipeline.job": {
            "id": job_id,
            "data": {
                "actionConfiguration": {
                    "configuration": {
                        "FunctionName": "github-release",
                        "UserParameters": user_parameters,
                    }
                }
            },
        }
    }


@pytest.fixture(autouse=True)
def clear_token_cache():
    credentials.token_cache.clear()
    yield
    credentials.token_cache.clear()


@pytest.fixture
def release_params():
    return {
        "mode": "createRelease",
        "owner": "acme",
        "repository": "widget",
        "commit": "0123456789abcdef0123456789abcdef01234567",
        "currentRelease": "v1.1.0",
        "prevRelease": "v1.0.0",
        "unstableBranch": "unstable",
        "prerelease": "true",
    }


@pytest.fixture
def fake_repo():
    return FakeRepo()


@pytest.fixture
def fake_context():
    return FakeContext()
