from __future__ import annotations

from dataclasses import dataclass

from birthday_notifier.errors import SendError


@dataclass(frozen=True)
class BirthdayRecord:
    name: str
    month: int
    day: int


@dataclass(frozen=True)
class RosterLoad:
    records: tuple[BirthdayRecord, ...]
    malformed: tuple[str, ...]


@dataclass(frozen=True)
class OutboundMessage:
    template_name: str
    language_code: str
    parameters: tuple[str, str]
    text: str


@dataclass(frozen=True)
class DispatchSummary:
    matches: int
    recipients: int
    attempts: int
    failures: tuple[SendError, ...]
    dry_run: bool = False

    @property
    def sent(self) -> int:
        return self.attempts - len(self.failures)


@dataclass(frozen=True)
class TemplateInfo:
    name: str
    status: str
    category: str
    language: str
