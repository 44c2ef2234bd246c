class LeadNotifierError(Exception):
    pass


class ConfigurationError(LeadNotifierError):
    """Settings are missing or malformed; the message is safe to return to callers."""


class ForwardingError(LeadNotifierError):
    def __init__(self, message, error_code=None, description=None):
        super().__init__(message)
        self.error_code = error_code
        self.description = description

    @classmethod
    def from_reply(cls, reply):
        code = reply.get("error_code")
        description = reply.get("description") or "Unknown error"
        return cls(f"Telegram API error: {description}", error_code=code, description=description)
