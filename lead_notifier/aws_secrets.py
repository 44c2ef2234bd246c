import json
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .log import get_logger

logger = get_logger(__name__)

_TOKEN_KEYS = ("BOT_TOKEN", "bot_token", "TELEGRAM_BOT_TOKEN")


def _token_from_secret(secret_string):
    try:
        doc = json.loads(secret_string)
    except ValueError:
        return secret_string.strip() or None
    if isinstance(doc, dict):
        for key in _TOKEN_KEYS:
            if doc.get(key):
                return str(doc[key]).strip()
        return None
    if isinstance(doc, str):
        return doc.strip() or None
    return secret_string.strip() or None


def resolve_bot_token(environ=None, client=None):
    """Bot token from the environment, falling back to Secrets Manager.

    ``BOT_TOKEN_SECRET_ID`` names the secret (ARN or name). Returns ``None``
    when no token can be found; the handler reports that as not configured.
    """
    environ = os.environ if environ is None else environ
    token = (environ.get("BOT_TOKEN") or environ.get("TELEGRAM_BOT_TOKEN") or "").strip()
    if token:
        return token

    secret_id = (environ.get("BOT_TOKEN_SECRET_ID") or "").strip()
    if not secret_id:
        return None

    try:
        client = client or boto3.client("secretsmanager")
        resp = client.get_secret_value(SecretId=secret_id)
    except (ClientError, BotoCoreError) as e:
        logger.error("Could not read bot token secret %s: %s", secret_id, e)
        return None

    secret_string = resp.get("SecretString")
    if not secret_string:
        logger.error("Secret %s has no SecretString", secret_id)
        return None
    return _token_from_secret(secret_string)
