import json
import logging

import boto3
import botocore

import config

logger = logging.getLogger(__name__)

secretsmanager = boto3.client("secretsmanager", region_name=config.REGION)

# Error codes Secrets Manager documents for GetSecretValue
KNOWN_ERROR_CODES = (
    "DecryptionFailureException",
    "InternalServiceErrorException",
    "InvalidParameterException",
    "InvalidRequestException",
    "ResourceNotFoundException",
)


class CredentialError(RuntimeError):
    def __init__(self, code: str, detail: str = ""):
        self.code = code
        self.detail = detail
        super().__init__(f"Secrets Manager Error: {code}")


class TokenCache:
    """
    Single-slot token cache that lives as long as the Lambda container.

    Nothing ever invalidates it; a revoked token only shows up as a GitHub
    failure on the next call.
    """

    def __init__(self):
        self.token = None
        self.secret = None

    def get(self):
        return self.token

    def get_or_fetch(self, fetch) -> str:
        if self.token:
            return self.token
        token, secret = fetch()
        self.token = token
        self.secret = secret
        return token

    def clear(self):
        self.token = None
        self.secret = None


token_cache = TokenCache()


def _secret_text(resp: dict) -> str:
    if "SecretString" in resp and resp["SecretString"] is not None:
        return resp["SecretString"]
    binary = resp.get("SecretBinary")
    if binary is None:
        raise CredentialError("MalformedSecret", "secret has neither SecretString nor SecretBinary")
    # boto3 has already base64-decoded the blob
    return binary.decode("utf-8")


def fetch_token(secret_id: str, client=None):
    """
    Reads the GitHub OAuth token out of a Secrets Manager secret.

    The secret holds JSON like {"oAuthToken": "..."}. Returns (token, raw secret).
    Every Secrets Manager error is fatal; nothing is retried.
    """
    client = client or secretsmanager
    try:
        resp = client.get_secret_value(SecretId=secret_id)
    except botocore.exceptions.ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        if code not in KNOWN_ERROR_CODES:
            logger.warning(f"Unrecognized Secrets Manager error code {code}")
        logger.warning(f"Secrets Manager Error: {code}")
        raise CredentialError(code, str(e)) from e
    except botocore.exceptions.BotoCoreError as e:
        logger.warning(f"Secrets Manager unreachable: {e}")
        raise CredentialError(type(e).__name__, str(e)) from e

    try:
        secret = _secret_text(resp)
        token = json.loads(secret)["oAuthToken"]
    except (ValueError, KeyError, TypeError) as e:
        raise CredentialError("MalformedSecret", f"secret has no oAuthToken: {e}") from e
    if not token:
        raise CredentialError("MalformedSecret", "oAuthToken is empty")
    return token, secret


def resolve_token(secret_id: str, cache: TokenCache = None, client=None) -> str:
    cache = cache or token_cache
    return cache.get_or_fetch(lambda: fetch_token(secret_id, client))
