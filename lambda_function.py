import json
import logging

import config
from credentials import CredentialError, resolve_token, token_cache
from github_client import GitHubClient
from job_report import put_job_failure, put_job_success
from parameters import (
    CREATE_RELEASE,
    CREATE_UNSTABLE_BRANCH,
    UPDATE_RELEASE,
    ParameterError,
    user_parameters_from_event,
)
from release_ops import OperationResult, create_release, create_unstable_branch, update_release

logger = logging.getLogger()
logger.setLevel(config.LOG_LEVEL)

NO_MODE = "No release mode was set."
TOKEN_NOT_SET = "Token value has not been set."
UNEXPECTED_FAILURE = "GitHub operation failed unexpectedly."


def run_operation(repo, params) -> OperationResult:
    """Runs exactly one GitHub operation, picked by params.mode."""
    if params.mode == CREATE_RELEASE:
        return create_release(repo, params)
    elif params.mode == CREATE_UNSTABLE_BRANCH:
        return create_unstable_branch(repo, params)
    elif params.mode == UPDATE_RELEASE:
        return update_release(repo, params)
    else:
        return OperationResult.failure(NO_MODE)


def _succeed(job_id: str, message: str) -> dict:
    if not put_job_success(job_id, message):
        return {
            "statusCode": 502,
            "body": json.dumps({"error": "Could not report job success", "message": message}),
        }
    return {"statusCode": 200, "body": json.dumps({"message": message})}


def _fail(job_id: str, message: str, execution_id: str) -> dict:
    # ReportError propagates: the invocation ends in error
    put_job_failure(job_id, message, execution_id)
    return {"statusCode": 500, "body": json.dumps({"error": message})}


def lambda_handler(event, context):
    """
    CodePipeline Invoke action.

    Event contract (CodePipeline job):
      - CodePipeline.job.id: job id every outcome is reported against
      - CodePipeline.job.data.actionConfiguration.configuration.UserParameters:
        JSON string with mode, owner, repository, commit, currentRelease,
        prevRelease, unstableBranch, prerelease
      - mode: "createRelease" | "createUnstableBranch" | "updateRelease"

    Exactly one of put_job_success_result / put_job_failure_result is sent.
    """
    job_id = event["CodePipeline.job"]["id"]
    execution_id = getattr(context, "aws_request_id", None) or job_id
    logger.info(f"The Job ID is: {job_id} (environment: {config.ENVIRONMENT})")

    try:
        params = user_parameters_from_event(event)
    except ParameterError as e:
        logger.error(f"Bad UserParameters for job {job_id}: {e}")
        return _fail(job_id, f"Invalid UserParameters: {e}", execution_id)

    logger.info(f"User parameters: {json.dumps(params.to_log())}")

    if not params.has_known_mode:
        return _fail(job_id, NO_MODE, execution_id)

    if token_cache.get() is None and not config.SECRET_TOKEN_ARN:
        logger.error("SECRET_TOKEN_ARN is not configured and no token is cached")
        return _fail(job_id, TOKEN_NOT_SET, execution_id)

    try:
        token = resolve_token(config.SECRET_TOKEN_ARN, token_cache)
    except CredentialError as e:
        logger.error(f"Token lookup failed: {e} {e.detail}")
        return _fail(job_id, str(e), execution_id)

    try:
        repo = GitHubClient(token).repo(params.owner, params.repository)
        result = run_operation(repo, params)
    except Exception as e:
        # anything unexpected still has to reach CodePipeline as a failure
        logger.exception(f"{params.mode} raised {type(e).__name__}")
        result = OperationResult.failure(UNEXPECTED_FAILURE, e)

    if result.ok:
        return _succeed(job_id, result.message)
    logger.error(f"{params.mode} failed: {result.message} {result.detail}")
    return _fail(job_id, result.message, execution_id)
