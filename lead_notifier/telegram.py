from typing import Optional, Protocol, Union

import requests

from .errors import ForwardingError
from .log import get_logger
from .settings import DEFAULT_API_BASE

logger = get_logger(__name__)

ChatId = Union[int, str]


class Transport(Protocol):
    def deliver(self, chat_id: ChatId, text: str, topic_id: Optional[int] = None) -> dict:
        ...


class TelegramForwarder:
    """One best-effort ``sendMessage`` call per delivery, no retries."""

    def __init__(self, bot_token: str, api_base: str = DEFAULT_API_BASE,
                 session: Optional[requests.Session] = None):
        self._token = bot_token
        self._api_base = api_base.rstrip("/")
        self._session = session

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/bot{self._token}/sendMessage"

    def _redact(self, text: str) -> str:
        return text.replace(self._token, "***") if self._token else text

    def deliver(self, chat_id: ChatId, text: str, topic_id: Optional[int] = None) -> dict:
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        if topic_id is not None:
            payload["message_thread_id"] = topic_id

        logger.info("POST %s chat_id=%s thread=%s", self._redact(self.endpoint), chat_id, topic_id)
        post = self._session.post if self._session is not None else requests.post
        # exceptions are not chained: their text and tracebacks carry the token
        try:
            resp = post(self.endpoint, json=payload)
        except requests.RequestException as e:
            raise ForwardingError(self._redact(f"Telegram request failed: {e}")) from None
        # Telegram answers errors with a JSON body too, so the status code is not checked
        try:
            reply = resp.json()
        except ValueError:
            raise ForwardingError(f"Telegram returned a non-JSON response (HTTP {resp.status_code})") from None

        logger.info("Telegram replied ok=%s", reply.get("ok") if isinstance(reply, dict) else None)
        return reply


def send_message(bot_token: str, chat_id: ChatId, text: str, topic_id: Optional[int] = None,
                 session: Optional[requests.Session] = None) -> dict:
    return TelegramForwarder(bot_token, session=session).deliver(chat_id, text, topic_id)
