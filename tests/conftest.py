import importlib.util
from pathlib import Path

import pytest

from lead_notifier import Settings

ROOT = Path(__file__).resolve().parent.parent

TOKEN = "123456:SECRET-token"

ENV_VARS = (
    "BOT_TOKEN", "TELEGRAM_BOT_TOKEN", "BOT_TOKEN_SECRET_ID",
    "CHAT_ID", "TELEGRAM_CHAT_ID", "TOPIC_ID", "TELEGRAM_TOPIC_ID",
    "APP_ENV", "SITE_NAME", "TELEGRAM_API_BASE", "ENABLE_CORS", "SUPPORTS_TOPICS",
)


class FakeTransport:
    def __init__(self, reply=None, error=None):
        self.reply = reply if reply is not None else {"ok": True, "result": {"message_id": 42}}
        self.error = error
        self.calls = []

    def deliver(self, chat_id, text, topic_id=None):
        self.calls.append({"chat_id": chat_id, "text": text, "topic_id": topic_id})
        if self.error is not None:
            raise self.error
        return self.reply


class FakeResponse:
    def __init__(self, payload=None, status_code=200, error=None):
        self.payload = payload
        self.status_code = status_code
        self.error = error

    def json(self):
        if self.error is not None:
            raise self.error
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse({"ok": True, "result": {"message_id": 1}})
        self.error = error
        self.calls = []

    def post(self, url, json=None):
        self.calls.append({"url": url, "json": json})
        if self.error is not None:
            raise self.error
        return self.response


def load_module(name, relpath):
    spec = importlib.util.spec_from_file_location(name, ROOT / relpath)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def settings():
    return Settings(bot_token=TOKEN, chat_id="-1001234567890")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def valid_body():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "company": "Analytical Engines",
        "message": "Hello there",
    }
