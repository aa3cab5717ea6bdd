from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from birthday_notifier.date_logic import (
    daily_target_date,
    find_in_month,
    find_on_date,
    now_in_timezone,
    report_month,
)
from birthday_notifier.dispatcher import Dispatcher
from birthday_notifier.errors import ConfigurationError, NotifierError
from birthday_notifier.models import DispatchSummary
from birthday_notifier.providers import MessageProvider, WhatsAppCloudProvider, build_provider
from birthday_notifier.roster import load_roster
from birthday_notifier.settings import Settings, load_settings

LOGGER = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _month_number(value: str) -> int:
    month = int(value)
    if month < 0 or month > 12:
        raise argparse.ArgumentTypeError("target month must be between 0 and 12")
    return month


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="birthday-notifier",
        description="Send birthday reminders from a CSV roster to a fixed list of collectors.",
    )
    parser.add_argument("--csv", type=Path, default=None, help="path to the CSV file containing biodata")
    parser.add_argument("--lookahead", type=int, default=1, help="days ahead to remind")
    parser.add_argument("--tz", default=None, help="IANA timezone")
    parser.add_argument("--dry", action="store_true", help="print instead of sending")
    parser.add_argument(
        "--monthly",
        action="store_true",
        help="send monthly birthday summary instead of daily reminders",
    )
    parser.add_argument(
        "--target-month",
        type=_month_number,
        default=0,
        help="override target month for monthly reports (1-12, 0=auto)",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")

    diagnostics = parser.add_mutually_exclusive_group()
    diagnostics.add_argument(
        "--list-templates",
        action="store_true",
        help="list message templates registered for the WhatsApp phone ID and exit",
    )
    diagnostics.add_argument(
        "--check-credentials",
        action="store_true",
        help="fetch the WhatsApp phone number record to verify the token and exit",
    )
    diagnostics.add_argument(
        "--send-hello",
        metavar="RECIPIENT",
        default=None,
        help="send the stock hello_world template to one number and exit",
    )
    return parser


def run_pipeline(
    args: argparse.Namespace,
    settings: Settings,
    provider: MessageProvider,
    *,
    dispatcher: Dispatcher | None = None,
) -> DispatchSummary:
    csv_path = args.csv if args.csv is not None else settings.csv_path
    timezone_name = args.tz or settings.timezone
    now = now_in_timezone(timezone_name)

    roster = load_roster(csv_path)
    if roster.malformed:
        LOGGER.warning(
            "Skipped %s row(s) with invalid DOB format (expect YYYY-MM-DD)",
            len(roster.malformed),
        )

    if dispatcher is None:
        dispatcher = Dispatcher(
            provider,
            settings.recipients,
            template_name=settings.template_name,
            language_code=settings.language_code,
            dry_run=args.dry,
        )

    if args.monthly:
        month_start = report_month(now, args.target_month)
        matches = find_in_month(roster.records, month_start.month)
        return dispatcher.dispatch_monthly(matches, month_start)

    target = daily_target_date(now, args.lookahead)
    matches = find_on_date(roster.records, target.month, target.day)
    return dispatcher.dispatch_daily(matches, now.date())


def run_diagnostics(args: argparse.Namespace, provider: MessageProvider) -> None:
    if not isinstance(provider, WhatsAppCloudProvider):
        raise ConfigurationError("Diagnostics are only available for the whatsapp provider")

    if args.list_templates:
        templates = provider.list_templates()
        if not templates:
            print("No templates found.")
        for template in templates:
            print(f"{template.name} | status={template.status} | category={template.category} | language={template.language}")
    elif args.check_credentials:
        info = provider.check_credentials()
        print(f"Credentials OK: {info}")
    else:
        provider.send_hello(args.send_hello)
        print(f"hello_world template sent to {args.send_hello}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = load_settings()
        provider = build_provider(settings)
        if args.list_templates or args.check_credentials or args.send_hello is not None:
            run_diagnostics(args, provider)
        else:
            run_pipeline(args, settings, provider)
    except NotifierError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
