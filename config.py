import os

ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")
REGION = os.environ.get("REGION") or os.environ.get("AWS_REGION")
SECRET_TOKEN_ARN = os.environ.get("SECRET_TOKEN_ARN")  # required unless a token is cached

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_WEB_URL = os.environ.get("GITHUB_WEB_URL", "https://github.com").rstrip("/")
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "10"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
