import json

import pytest
from botocore.exceptions import ClientError, NoRegionError

from conftest import TOKEN
from lead_notifier import Settings
from lead_notifier import aws_secrets
from lead_notifier.aws_secrets import resolve_bot_token
from lead_notifier.settings import DEFAULT_API_BASE, DEFAULT_SITE_NAME, coerce_int, env_flag


class FakeSecretsClient:
    def __init__(self, secret_string=None, error=None):
        self.secret_string = secret_string
        self.error = error
        self.calls = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        if self.error is not None:
            raise self.error
        return {"SecretString": self.secret_string} if self.secret_string is not None else {}


def test_from_env_reads_values():
    settings = Settings.from_env({
        "BOT_TOKEN": TOKEN,
        "CHAT_ID": " -100 ",
        "TOPIC_ID": "4",
        "APP_ENV": "Development",
        "SITE_NAME": "Acme",
        "TELEGRAM_API_BASE": "http://localhost:8081/",
    })
    assert settings == Settings(bot_token=TOKEN, chat_id="-100", topic_id="4", debug=True,
                                site_name="Acme", api_base="http://localhost:8081")


def test_from_env_telegram_prefixed_aliases():
    settings = Settings.from_env({"TELEGRAM_BOT_TOKEN": TOKEN, "TELEGRAM_CHAT_ID": "5", "TELEGRAM_TOPIC_ID": "6"})
    assert (settings.bot_token, settings.chat_id, settings.topic_id) == (TOKEN, "5", "6")


def test_from_env_defaults():
    settings = Settings.from_env({"BOT_TOKEN": "  ", "CHAT_ID": "", "APP_ENV": "production"})
    assert settings.bot_token is None
    assert settings.chat_id is None
    assert settings.topic_id is None
    assert settings.debug is False
    assert settings.site_name == DEFAULT_SITE_NAME
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.missing(settings.resolve_token()) == ["BOT_TOKEN", "CHAT_ID"]


def test_from_env_explicit_token_wins():
    assert Settings.from_env({"BOT_TOKEN": "env"}, bot_token="explicit").bot_token == "explicit"


def test_from_env_uses_process_environment(clean_env):
    clean_env.setenv("CHAT_ID", "99")
    assert Settings.from_env().chat_id == "99"


def test_repr_hides_token():
    assert TOKEN not in repr(Settings(bot_token=TOKEN, chat_id="1"))


@pytest.mark.parametrize("value, expected", [
    ("42", 42), ("-1001234567890", -1001234567890), (" 7 ", 7), (12, 12), (3.0, 3),
    ("abc", None), ("1.5", None), ("", None), (None, None), (True, None), (2.5, None),
])
def test_coerce_int(value, expected):
    assert coerce_int(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("1", True), ("true", True), ("YES", True), (" on ", True),
    ("0", False), ("false", False), ("nope", False),
])
def test_env_flag(value, expected):
    assert env_flag({"FLAG": value}, "FLAG") is expected


def test_env_flag_default():
    assert env_flag({}, "FLAG", True) is True
    assert env_flag({"FLAG": " "}, "FLAG", False) is False


def test_token_from_environment_skips_secrets_manager():
    client = FakeSecretsClient("unused")
    assert resolve_bot_token({"BOT_TOKEN": TOKEN, "BOT_TOKEN_SECRET_ID": "arn"}, client=client) == TOKEN
    assert client.calls == []


def test_no_token_and_no_secret():
    assert resolve_bot_token({}, client=FakeSecretsClient("unused")) is None


@pytest.mark.parametrize("secret_string", [
    TOKEN,
    f"  {TOKEN}\n",
    json.dumps(TOKEN),
    json.dumps({"BOT_TOKEN": TOKEN}),
    json.dumps({"bot_token": TOKEN}),
])
def test_token_from_secrets_manager(secret_string):
    client = FakeSecretsClient(secret_string)
    assert resolve_bot_token({"BOT_TOKEN_SECRET_ID": "contact-relay/bot-token"}, client=client) == TOKEN
    assert client.calls == ["contact-relay/bot-token"]


@pytest.mark.parametrize("client", [
    FakeSecretsClient(json.dumps({"other": "x"})),
    FakeSecretsClient(None),
    FakeSecretsClient(error=ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "nope"}},
                                        "GetSecretValue")),
])
def test_unusable_secret(client):
    assert resolve_bot_token({"BOT_TOKEN_SECRET_ID": "contact-relay/bot-token"}, client=client) is None


def test_resolver_used_only_without_token():
    calls = []

    def resolver():
        calls.append(1)
        return "from-store"

    assert Settings(bot_token=TOKEN, token_resolver=resolver).resolve_token() == TOKEN
    assert calls == []
    assert Settings(token_resolver=resolver).resolve_token() == "from-store"
    assert calls == [1]


def test_from_env_keeps_resolver_uncalled():
    calls = []
    settings = Settings.from_env({"CHAT_ID": "1"}, token_resolver=lambda: calls.append(1))
    assert settings.bot_token is None
    assert calls == []


def test_missing_region_yields_no_token(monkeypatch):
    def no_region(*args, **kwargs):
        raise NoRegionError()

    monkeypatch.setattr(aws_secrets.boto3, "client", no_region)
    assert resolve_bot_token({"BOT_TOKEN_SECRET_ID": "contact-relay/bot-token"}) is None
