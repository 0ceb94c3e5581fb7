"""API credential resolution (plain setting or AWS Secrets Manager)."""

import json
import logging
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError

from ..config import Settings
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _get_secret_api_key(secret_arn: str, region: str) -> str:
    """Retrieve the Gemini API key from AWS Secrets Manager (cached)."""
    client = boto3.client("secretsmanager", region_name=region)
    response = client.get_secret_value(SecretId=secret_arn)
    secret = json.loads(response["SecretString"])
    return secret["api_key"]


def resolve_gemini_api_key(config: Settings) -> str:
    """Return the Gemini API key, preferring the plain setting.

    Raises:
        ConfigurationError: If no key is configured or the secret can't be read
    """
    if config.gemini_api_key.strip():
        return config.gemini_api_key.strip()

    if config.gemini_api_key_secret_arn:
        try:
            return _get_secret_api_key(config.gemini_api_key_secret_arn, config.aws_region)
        except (ClientError, KeyError, ValueError) as e:
            logger.error(f"Failed to read Gemini API key secret: {e}")
            raise ConfigurationError("Gemini API key secret could not be read") from e

    logger.error("GEMINI_API_KEY is not set in environment variables")
    raise ConfigurationError("AI Service Unavailable")
