from __future__ import annotations


class NotifierError(RuntimeError):
    pass


class ConfigurationError(NotifierError):
    pass


class SourceReadError(NotifierError):
    pass


class ValidationError(NotifierError, ValueError):
    """A single roster row whose date of birth cannot be used."""

    def __init__(self, raw_value: str, reason: str) -> None:
        super().__init__(f"{reason}: {raw_value!r}")
        self.raw_value = raw_value
        self.reason = reason


class SendError(NotifierError):
    """One outbound message that the provider did not accept."""

    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(f"send to {recipient} failed: {reason}")
        self.recipient = recipient
        self.reason = reason
