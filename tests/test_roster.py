from pathlib import Path

import pytest

from birthday_notifier.errors import ConfigurationError, SourceReadError, ValidationError
from birthday_notifier.models import BirthdayRecord
from birthday_notifier.roster import load_roster, parse_month_day

HEADER = "S/N,FULL NAME (SCHOOL SURNAME FIRST),DATE OF BIRTH,PHONE\n"


def _write_csv(tmp_path: Path, body: str, header: str = HEADER) -> Path:
    path = tmp_path / "roster.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


def test_month_and_day_ignore_year(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "1,Alice,1990-07-04,0700\n2,Bob,2031-07-04,0701\n")

    roster = load_roster(path)

    assert roster.records == (
        BirthdayRecord(name="Alice", month=7, day=4),
        BirthdayRecord(name="Bob", month=7, day=4),
    )
    assert roster.malformed == ()


def test_duplicates_are_dropped_case_insensitively(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "1,Okafor Ada,2001-03-14,\n"
        "2,Bello Tunde,2001-05-01,\n"
        "3,OKAFOR ADA,1999-03-14,\n"
        "4,Okafor Ada,2001-03-15,\n",
    )

    roster = load_roster(path)

    assert [record.name for record in roster.records] == ["Okafor Ada", "Bello Tunde", "Okafor Ada"]
    assert roster.records[0] == BirthdayRecord(name="Okafor Ada", month=3, day=14)
    assert roster.records[2].day == 15


def test_malformed_dates_are_counted_not_fatal(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "1,Alice,14/03/2001,\n"
        "2,Bob,2001-13-01,\n"
        "3,Carol,2001-00-10,\n"
        "4,Dan,2001-04-32,\n"
        "5,Eve,2001/04/02,\n"
        "6,Femi,2001-4-2,\n"
        "7,Gbenga,2001-04-02,\n",
    )

    roster = load_roster(path)

    assert roster.records == (BirthdayRecord(name="Gbenga", month=4, day=2),)
    assert roster.malformed == (
        "14/03/2001",
        "2001-13-01",
        "2001-00-10",
        "2001-04-32",
        "2001/04/02",
        "2001-4-2",
    )


def test_blank_name_or_dob_is_skipped_without_counting(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "1,,2001-01-01,\n2,Alice,   ,\n3\n4,  Bola  ,  2002-02-02  ,\n")

    roster = load_roster(path)

    assert roster.records == (BirthdayRecord(name="Bola", month=2, day=2),)
    assert roster.malformed == ()


def test_day_range_is_not_calendar_aware(tmp_path: Path) -> None:
    # Range-only day check: 31 is accepted in every month, including February.
    path = _write_csv(tmp_path, "1,Alice,2001-02-31,\n2,Bob,2001-04-31,\n")

    roster = load_roster(path)

    assert roster.records == (
        BirthdayRecord(name="Alice", month=2, day=31),
        BirthdayRecord(name="Bob", month=4, day=31),
    )


def test_header_match_is_trimmed_and_case_insensitive(tmp_path: Path) -> None:
    header = "\ufeff  date of birth , Full Name (School Surname First)  \n"
    path = _write_csv(tmp_path, "2000-12-25,Chidi\n", header=header)

    roster = load_roster(path)

    assert roster.records == (BirthdayRecord(name="Chidi", month=12, day=25),)


def test_missing_required_column_is_fatal(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "Alice,2000-01-01\n", header="NAME,DATE OF BIRTH\n")

    with pytest.raises(ConfigurationError):
        load_roster(path)


def test_missing_file_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SourceReadError):
        load_roster(tmp_path / "absent.csv")


def test_empty_file_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(SourceReadError):
        load_roster(path)


def test_parse_month_day_rejects_non_digits() -> None:
    with pytest.raises(ValidationError) as exc_info:
        parse_month_day("2001-ab-01")

    assert exc_info.value.raw_value == "2001-ab-01"


def test_parse_month_day_keeps_raw_substrings() -> None:
    assert parse_month_day("abcd-07-04") == ("07", "04", 7, 4)


def test_undecodable_file_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "roster.csv"
    path.write_bytes(HEADER.encode("utf-8") + b"1,Ad\xff\xfea,2001-01-01,\n")

    with pytest.raises(SourceReadError):
        load_roster(path)
