from datetime import datetime

from .settings import DEFAULT_SITE_NAME

TIMESTAMP_FORMAT = "%d.%m.%Y, %H:%M"

# "&" goes first so entities inserted by later steps are not escaped again
_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_html(text) -> str:
    """Escape text for Telegram's HTML parse mode.

    Single pass: escaping ``&lt;`` again gives ``&amp;lt;``.
    """
    if not text:
        return ""
    text = str(text)
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def format_message(name, email, company, message, now=None, site_name=DEFAULT_SITE_NAME) -> str:
    sent_at = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

    lines = [
        f"🎯 <b>Новая заявка с сайта {escape_html(site_name)}</b>",
        "",
        f"👤 <b>Имя:</b> {escape_html(name)}",
        f"📧 <b>Email:</b> {escape_html(email)}",
    ]
    if company and str(company).strip():
        lines.append(f"🏢 <b>Компания:</b> {escape_html(company)}")
    lines += [
        "",
        "💬 <b>Сообщение:</b>",
        escape_html(message),
        "",
        f"📅 <b>Отправлено:</b> {sent_at}",
    ]
    return "\n".join(lines)
