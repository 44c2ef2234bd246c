import base64
import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .errors import ConfigurationError, ForwardingError
from .formatter import format_message
from .log import get_logger
from .settings import Settings, coerce_int
from .telegram import TelegramForwarder, Transport

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

METHOD_NOT_ALLOWED = "Method not allowed. Use POST."
INVALID_JSON = "Invalid JSON in request body"
MISSING_FIELDS = "Missing required fields: name, email, message"
INVALID_EMAIL = "Invalid email format"
NOT_CONFIGURED = "Telegram bot not configured. Please set BOT_TOKEN and CHAT_ID environment variables."
INVALID_CHAT_ID = "Invalid CHAT_ID format. Must be a number."
SEND_FAILED = "Failed to send Telegram notification"
SENT = "Telegram notification sent successfully"

RawBody = Union[str, bytes, Mapping[str, Any], None]


@dataclass(frozen=True)
class HandlerOptions:
    enable_cors: bool = False
    supports_topics: bool = False


@dataclass
class HttpResponse:
    status_code: int
    body: Optional[dict] = None
    headers: dict = field(default_factory=lambda: {"Content-Type": "application/json"})

    def json(self) -> str:
        return json.dumps(self.body if self.body is not None else {}, ensure_ascii=False)

    def to_lambda(self) -> dict:
        return {"statusCode": self.status_code, "headers": dict(self.headers), "body": self.json()}


@dataclass(frozen=True)
class Submission:
    name: Any
    email: Any
    message: Any
    company: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Submission":
        return cls(
            name=payload.get("name"),
            email=payload.get("email"),
            message=payload.get("message"),
            company=payload.get("company"),
        )

    @property
    def complete(self) -> bool:
        return bool(self.name and self.email and self.message)

    @property
    def email_valid(self) -> bool:
        return EMAIL_RE.fullmatch(str(self.email)) is not None


def parse_body(raw_body: RawBody, base64_encoded: bool = False) -> Optional[dict]:
    """The JSON object carried by ``raw_body``, or ``None`` if there isn't one.

    Platforms that already parsed the body may pass the mapping through.
    """
    if isinstance(raw_body, Mapping):
        return dict(raw_body)
    if raw_body is None:
        return None
    try:
        if base64_encoded:
            raw_body = base64.b64decode(raw_body)
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8")
        data = json.loads(raw_body)
    except (ValueError, TypeError):
        return None
    return data if isinstance(data, dict) else None


class SubmissionHandler:
    def __init__(self, settings: Settings, options: HandlerOptions = HandlerOptions(),
                 transport: Optional[Transport] = None):
        self.settings = settings
        self.options = options
        self._transport = transport

    def _respond(self, status_code: int, body: dict) -> HttpResponse:
        resp = HttpResponse(status_code, body)
        if self.options.enable_cors:
            resp.headers.update(CORS_HEADERS)
        return resp

    def _fail(self, status_code: int, error: str, details: Optional[str] = None) -> HttpResponse:
        body = {"success": False, "error": error}
        if details is not None and self.settings.debug:
            body["details"] = details
        return self._respond(status_code, body)

    def handle(self, http_method: str, headers: Optional[Mapping[str, str]], raw_body: RawBody,
               base64_encoded: bool = False) -> HttpResponse:
        method = (http_method or "").upper()
        resp = self._handle(method, raw_body, base64_encoded)
        logger.info("%s -> %s", method or "-", resp.status_code)
        return resp

    def _handle(self, method: str, raw_body: RawBody, base64_encoded: bool) -> HttpResponse:
        if method == "OPTIONS" and self.options.enable_cors:
            return self._respond(200, {"success": True})
        if method != "POST":
            return self._fail(405, METHOD_NOT_ALLOWED)

        payload = parse_body(raw_body, base64_encoded)
        if payload is None:
            return self._fail(400, INVALID_JSON)

        submission = Submission.from_payload(payload)
        if not submission.complete:
            return self._fail(400, MISSING_FIELDS)
        if not submission.email_valid:
            return self._fail(400, INVALID_EMAIL)

        domain = str(submission.email).rsplit("@", 1)[-1]
        logger.info("Submission received from a sender at %s", domain)

        try:
            bot_token, chat_id, topic_id = self._destination()
        except ConfigurationError as e:
            return self._fail(500, str(e))

        try:
            message_id = self._forward(submission, bot_token, chat_id, topic_id)
        except Exception as e:
            logger.exception("Error sending Telegram notification")
            return self._fail(500, SEND_FAILED, details=str(e))

        logger.info("Telegram message %s delivered", message_id)
        return self._respond(200, {"success": True, "message": SENT, "messageId": message_id})

    def _destination(self):
        # only a valid POST gets here; the token resolver may call Secrets Manager
        bot_token = self.settings.resolve_token()
        missing = self.settings.missing(bot_token)
        if missing:
            logger.error("Telegram configuration missing: %s", ", ".join(missing))
            raise ConfigurationError(NOT_CONFIGURED)

        chat_id = coerce_int(self.settings.chat_id)
        if chat_id is None:
            logger.error("CHAT_ID is not numeric")
            raise ConfigurationError(INVALID_CHAT_ID)

        topic_id = None
        if self.options.supports_topics and self.settings.topic_id not in (None, ""):
            topic_id = coerce_int(self.settings.topic_id)
            if topic_id is None:
                logger.warning("Invalid TOPIC_ID format, sending to the general chat")
        return bot_token, chat_id, topic_id

    def _forward(self, submission: Submission, bot_token: str, chat_id: int, topic_id: Optional[int]):
        text = format_message(submission.name, submission.email, submission.company, submission.message,
                              site_name=self.settings.site_name)
        transport = self._transport or TelegramForwarder(bot_token, self.settings.api_base)

        reply = transport.deliver(chat_id, text, topic_id)
        if not isinstance(reply, dict):
            raise ForwardingError("Telegram API error: unexpected response")
        if not reply.get("ok"):
            raise ForwardingError.from_reply(reply)
        return (reply.get("result") or {}).get("message_id")
