from __future__ import annotations

import logging
import sys
import time
from collections.abc import Callable, Sequence
from datetime import date
from typing import TextIO

from birthday_notifier.errors import SendError
from birthday_notifier.messages import daily_message, month_label, monthly_message
from birthday_notifier.models import BirthdayRecord, DispatchSummary, OutboundMessage
from birthday_notifier.providers import MessageProvider

LOGGER = logging.getLogger(__name__)

SEND_DELAY_SECONDS = 0.25


class Dispatcher:
    """Fans each message out to every recipient, one send at a time.

    Sends are best-effort: a failure is logged and collected, and the
    remaining recipients are still attempted. In dry-run mode the payload
    is written to ``dry_run_stream`` and the provider is never called.
    """

    def __init__(
        self,
        provider: MessageProvider,
        recipients: Sequence[str],
        *,
        template_name: str,
        language_code: str,
        dry_run: bool = False,
        send_delay: float = SEND_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        dry_run_stream: TextIO | None = None,
    ) -> None:
        self._provider = provider
        self._recipients = tuple(recipients)
        self._template_name = template_name
        self._language_code = language_code
        self._dry_run = dry_run
        self._send_delay = send_delay
        self._sleep = sleep
        self._dry_run_stream = dry_run_stream

    def dispatch_daily(self, records: Sequence[BirthdayRecord], today: date) -> DispatchSummary:
        if not records:
            LOGGER.info("No birthdays in window.")
            return self._summary(0, 0, [])

        attempts = 0
        failures: list[SendError] = []
        for record in records:
            message = daily_message(
                record,
                today,
                template_name=self._template_name,
                language_code=self._language_code,
            )
            for recipient in self._recipients:
                if self._dry_run:
                    self._write_dry_run(f"[DRY] to={recipient} | {message.parameters[0]} | {message.parameters[1]}")
                    continue
                attempts += 1
                self._attempt(recipient, message, failures, f"{record.name} ({message.parameters[1]})")

        summary = self._summary(len(records), attempts, failures)
        LOGGER.info(
            "Done. Birthdays matched: %s, messages sent per-collector: %s each.",
            summary.matches,
            summary.recipients,
        )
        return summary

    def dispatch_monthly(self, records: Sequence[BirthdayRecord], month_start: date) -> DispatchSummary:
        label = month_label(month_start)
        if not records:
            LOGGER.info("No birthdays in %s.", label)
            return self._summary(0, 0, [])

        message = monthly_message(
            records,
            month_start,
            template_name=self._template_name,
            language_code=self._language_code,
        )
        listing = message.parameters[0]

        attempts = 0
        failures: list[SendError] = []
        for recipient in self._recipients:
            if self._dry_run:
                self._write_dry_run(f"[DRY MONTHLY] to={recipient} | Monthly Report for {label} | {listing}")
                continue
            attempts += 1
            self._attempt(recipient, message, failures, f"monthly report for {label}")

        summary = self._summary(len(records), attempts, failures)
        LOGGER.info(
            "Done. Monthly report for %s covering %s birthdays sent to %s recipients.",
            label,
            summary.matches,
            summary.recipients,
        )
        return summary

    def _attempt(
        self,
        recipient: str,
        message: OutboundMessage,
        failures: list[SendError],
        description: str,
    ) -> None:
        try:
            self._provider.send(recipient, message)
        except SendError as exc:
            LOGGER.error("send error to %s: %s", recipient, exc.reason)
            failures.append(exc)
        else:
            LOGGER.info("sent to %s: %s", recipient, description)
        self._sleep(self._send_delay)

    def _write_dry_run(self, line: str) -> None:
        stream = self._dry_run_stream if self._dry_run_stream is not None else sys.stdout
        stream.write(line + "\n")

    def _summary(self, matches: int, attempts: int, failures: list[SendError]) -> DispatchSummary:
        return DispatchSummary(
            matches=matches,
            recipients=len(self._recipients),
            attempts=attempts,
            failures=tuple(failures),
            dry_run=self._dry_run,
        )
