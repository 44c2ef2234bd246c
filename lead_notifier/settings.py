import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Union

DEFAULT_SITE_NAME = "Кассиопея AI"
DEFAULT_API_BASE = "https://api.telegram.org"

_TRUTHY = {"1", "true", "yes", "on"}


def _first(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def env_flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    bot_token: Optional[str] = field(default=None, repr=False)
    chat_id: Optional[Union[str, int]] = None
    topic_id: Optional[Union[str, int]] = None
    debug: bool = False
    site_name: str = DEFAULT_SITE_NAME
    api_base: str = DEFAULT_API_BASE
    # consulted only when bot_token is unset, once a submission needs delivering
    token_resolver: Optional[Callable[[], Optional[str]]] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, bot_token: Optional[str] = None,
                 token_resolver: Optional[Callable[[], Optional[str]]] = None) -> "Settings":
        """Read settings from ``environ`` (default ``os.environ``).

        Nothing is validated here; a missing token or a malformed chat id is
        reported by the handler when a submission arrives.
        """
        environ = os.environ if environ is None else environ
        return cls(
            bot_token=bot_token or _first(environ, "BOT_TOKEN", "TELEGRAM_BOT_TOKEN"),
            chat_id=_first(environ, "CHAT_ID", "TELEGRAM_CHAT_ID"),
            topic_id=_first(environ, "TOPIC_ID", "TELEGRAM_TOPIC_ID"),
            debug=(environ.get("APP_ENV") or "").strip().lower() == "development",
            site_name=_first(environ, "SITE_NAME") or DEFAULT_SITE_NAME,
            api_base=(_first(environ, "TELEGRAM_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            token_resolver=token_resolver,
        )

    def resolve_token(self) -> Optional[str]:
        if self.bot_token:
            return self.bot_token
        return self.token_resolver() if self.token_resolver is not None else None

    def missing(self, bot_token: Optional[str]):
        names = []
        if not bot_token:
            names.append("BOT_TOKEN")
        if self.chat_id is None or self.chat_id == "":
            names.append("CHAT_ID")
        return names


def coerce_int(value) -> Optional[int]:
    """``int`` for ints and integer strings such as ``"-100123"``; ``None`` otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
