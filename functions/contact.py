import os, json
from lead_notifier import HandlerOptions, Settings, SubmissionHandler
from lead_notifier.aws_secrets import resolve_bot_token
from lead_notifier.log import get_logger
from lead_notifier.settings import env_flag

logger = get_logger(__name__)


def handler(event, context):
    options = HandlerOptions(enable_cors=env_flag(os.environ, "ENABLE_CORS", True),
                             supports_topics=env_flag(os.environ, "SUPPORTS_TOPICS", True))
    try:
        # read on every invocation, never cached
        settings = Settings.from_env(token_resolver=resolve_bot_token)
        method = event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method")
        resp = SubmissionHandler(settings, options).handle(method, event.get("headers") or {}, event.get("body"),
                                                           base64_encoded=bool(event.get("isBase64Encoded")))
        return resp.to_lambda()
    except Exception:
        logger.exception("Unhandled error in contact handler")
        headers = {"Content-Type": "application/json"}
        if options.enable_cors:
            headers["Access-Control-Allow-Origin"] = "*"
        return {"statusCode": 500,
                "headers": headers,
                "body": json.dumps({"success": False, "error": "Failed to send Telegram notification"})}
