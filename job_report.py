import json
import logging

import boto3
import botocore

import config

logger = logging.getLogger(__name__)

codepipeline = boto3.client("codepipeline", region_name=config.REGION)

FAILURE_TYPE = "JobFailed"


class ReportError(RuntimeError):
    pass


def put_job_success(job_id: str, message: str, client=None) -> bool:
    """Returns False when CodePipeline could not be told; that is only logged."""
    client = client or codepipeline
    try:
        client.put_job_success_result(jobId=job_id)
    except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
        logger.error(f"putJobSuccessResult failed for job {job_id}: {e}")
        return False
    logger.info(f"Job {job_id} succeeded: {message}")
    return True


def put_job_failure(job_id: str, message: str, execution_id: str, client=None):
    client = client or codepipeline
    try:
        client.put_job_failure_result(
            jobId=job_id,
            failureDetails={
                "message": json.dumps(message),
                "type": FAILURE_TYPE,
                "externalExecutionId": execution_id,
            },
        )
    except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
        raise ReportError(f"putJobFailureResult failed for job {job_id}: {e}") from e
    logger.info(f"Job {job_id} failed: {message}")
