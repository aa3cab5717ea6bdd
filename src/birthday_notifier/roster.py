from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from pathlib import Path

from birthday_notifier.errors import ConfigurationError, SourceReadError, ValidationError
from birthday_notifier.models import BirthdayRecord, RosterLoad

LOGGER = logging.getLogger(__name__)

NAME_COLUMN = "FULL NAME (SCHOOL SURNAME FIRST)"
DOB_COLUMN = "DATE OF BIRTH"


def _find_column(header: Sequence[str], needle: str) -> int:
    wanted = needle.lower()
    for index, cell in enumerate(header):
        if cell.strip().lower() == wanted:
            return index
    return -1


def _cell(row: Sequence[str], index: int) -> str:
    if index >= len(row):
        return ""
    return row[index].strip()


def parse_month_day(raw_value: str) -> tuple[str, str, int, int]:
    """Extract month and day from a ``YYYY-MM-DD`` value without reading the year.

    Returns the raw ``MM``/``DD`` substrings alongside their integer values.
    Day is range-checked only, so ``02-31`` is accepted.
    """
    if len(raw_value) != 10 or raw_value[4] != "-" or raw_value[7] != "-":
        raise ValidationError(raw_value, "date of birth must use YYYY-MM-DD")

    mm, dd = raw_value[5:7], raw_value[8:10]
    if not (mm.isascii() and dd.isascii() and mm.isdigit() and dd.isdigit()):
        raise ValidationError(raw_value, "month and day must be numeric")

    month, day = int(mm), int(dd)
    if month < 1 or month > 12:
        raise ValidationError(raw_value, f"invalid month {month}")
    if day < 1 or day > 31:
        raise ValidationError(raw_value, f"invalid day {day}")

    return mm, dd, month, day


def load_roster(path: Path) -> RosterLoad:
    try:
        file_obj = path.open("r", encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise SourceReadError(f"Cannot open roster file {path}: {exc}") from exc

    records: list[BirthdayRecord] = []
    malformed: list[str] = []
    seen: set[str] = set()

    with file_obj:
        reader = csv.reader(file_obj)
        try:
            header = next(reader, None)
            if header is None:
                raise SourceReadError(f"Roster file {path} is empty")

            name_index = _find_column(header, NAME_COLUMN)
            dob_index = _find_column(header, DOB_COLUMN)
            if name_index < 0 or dob_index < 0:
                raise ConfigurationError(
                    f"CSV missing required headers: {NAME_COLUMN} and/or {DOB_COLUMN}"
                )

            for row in reader:
                name = _cell(row, name_index)
                dob = _cell(row, dob_index)
                if not name or not dob:
                    continue

                try:
                    mm, dd, month, day = parse_month_day(dob)
                except ValidationError as exc:
                    LOGGER.debug("Skipping row at line %s: %s", reader.line_num, exc)
                    malformed.append(dob)
                    continue

                key = f"{name.lower()}-{mm}-{dd}"
                if key in seen:
                    continue
                seen.add(key)

                records.append(BirthdayRecord(name=name, month=month, day=day))
        except (csv.Error, UnicodeDecodeError) as exc:
            raise SourceReadError(f"Failed reading roster file {path}: {exc}") from exc

    return RosterLoad(records=tuple(records), malformed=tuple(malformed))
