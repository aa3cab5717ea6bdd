from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from birthday_notifier.models import BirthdayRecord, OutboundMessage

DAILY_TEXT = "Birthday reminder: {name} celebrates on {date}."
MONTHLY_TEXT = "Birthdays in {month_label}: {listing}"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def birthday_date_label(record: BirthdayRecord, today: date) -> str:
    # The roster never keeps the birth year, so the label uses the current one.
    return f"{today.year:04d}-{record.month:02d}-{record.day:02d}"


def month_label(month_start: date) -> str:
    return f"{MONTH_NAMES[month_start.month - 1]} {month_start.year}"


def monthly_listing(records: Sequence[BirthdayRecord]) -> str:
    return ", ".join(f"{record.name} ({record.day})" for record in records)


def daily_message(
    record: BirthdayRecord,
    today: date,
    *,
    template_name: str,
    language_code: str,
) -> OutboundMessage:
    date_text = birthday_date_label(record, today)
    return OutboundMessage(
        template_name=template_name,
        language_code=language_code,
        parameters=(record.name, date_text),
        text=DAILY_TEXT.format(name=record.name, date=date_text),
    )


def monthly_message(
    records: Sequence[BirthdayRecord],
    month_start: date,
    *,
    template_name: str,
    language_code: str,
) -> OutboundMessage:
    label = month_label(month_start)
    listing = monthly_listing(records)
    return OutboundMessage(
        template_name=template_name,
        language_code=language_code,
        parameters=(listing, label),
        text=MONTHLY_TEXT.format(month_label=label, listing=listing),
    )
