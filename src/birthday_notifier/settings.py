from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from birthday_notifier.errors import ConfigurationError

PROVIDER_WHATSAPP = "whatsapp"
PROVIDER_TWILIO = "twilio"
ALLOWED_PROVIDERS = {PROVIDER_WHATSAPP, PROVIDER_TWILIO}
ALLOWED_TWILIO_CHANNELS = {"whatsapp", "sms"}

DEFAULT_CSV_PATH = Path("file") / "CAC-03-SET-BIODATA-FORM.csv"
DEFAULT_TIMEZONE = "Europe/London"
DEFAULT_TEMPLATE = "hello_world"
DEFAULT_LANGUAGE = "en"
DEFAULT_GRAPH_API_VERSION = "v20.0"


@dataclass(frozen=True)
class WhatsAppCredentials:
    phone_id: str
    token: str
    api_version: str = DEFAULT_GRAPH_API_VERSION


@dataclass(frozen=True)
class TwilioCredentials:
    account_sid: str
    auth_token: str
    from_number: str
    channel: str = "whatsapp"


@dataclass(frozen=True)
class Settings:
    provider: str
    recipients: tuple[str, ...]
    template_name: str
    language_code: str
    csv_path: Path
    timezone: str
    whatsapp: WhatsAppCredentials | None = None
    twilio: TwilioCredentials | None = None


def _required_env(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if value is None or not value.strip():
        raise ConfigurationError(f"Missing required environment variable: {name}")
    return value.strip()


def _env_or(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name, "").strip()
    return value or default


def parse_recipients(raw_value: str) -> tuple[str, ...]:
    """Split a comma-separated recipient list, removing all whitespace.

    An empty first entry means nothing usable was configured.
    """
    entries = ["".join(piece.split()) for piece in raw_value.split(",")]
    if not entries or not entries[0]:
        raise ConfigurationError(
            "WA_TO_LIST is empty; set comma-separated E.164 numbers without '+'"
        )
    return tuple(entry for entry in entries if entry)


def _load_whatsapp(environ: Mapping[str, str]) -> WhatsAppCredentials:
    return WhatsAppCredentials(
        phone_id=_required_env(environ, "WA_PHONE_ID"),
        token=_required_env(environ, "WA_TOKEN"),
        api_version=_env_or(environ, "WA_API_VERSION", DEFAULT_GRAPH_API_VERSION),
    )


def _load_twilio(environ: Mapping[str, str]) -> TwilioCredentials:
    channel = _env_or(environ, "TWILIO_CHANNEL", "whatsapp").lower()
    if channel not in ALLOWED_TWILIO_CHANNELS:
        raise ConfigurationError(f"TWILIO_CHANNEL must be one of {sorted(ALLOWED_TWILIO_CHANNELS)}")

    return TwilioCredentials(
        account_sid=_required_env(environ, "TWILIO_ACCOUNT_SID"),
        auth_token=_required_env(environ, "TWILIO_AUTH_TOKEN"),
        from_number=_required_env(environ, "TWILIO_FROM"),
        channel=channel,
    )


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    if environ is None:
        # Values already present in the process environment win over .env.
        load_dotenv(Path.cwd() / ".env", override=False)
        environ = os.environ

    provider = _env_or(environ, "NOTIFIER_PROVIDER", PROVIDER_WHATSAPP).lower()
    if provider not in ALLOWED_PROVIDERS:
        raise ConfigurationError(f"NOTIFIER_PROVIDER must be one of {sorted(ALLOWED_PROVIDERS)}")

    whatsapp = _load_whatsapp(environ) if provider == PROVIDER_WHATSAPP else None
    twilio = _load_twilio(environ) if provider == PROVIDER_TWILIO else None

    recipients = parse_recipients(_required_env(environ, "WA_TO_LIST"))

    return Settings(
        provider=provider,
        recipients=recipients,
        template_name=_env_or(environ, "WA_TEMPLATE", DEFAULT_TEMPLATE),
        language_code=_env_or(environ, "WA_LANG", DEFAULT_LANGUAGE),
        csv_path=Path(_env_or(environ, "CSV_PATH", str(DEFAULT_CSV_PATH))),
        timezone=_env_or(environ, "TIMEZONE", DEFAULT_TIMEZONE),
        whatsapp=whatsapp,
        twilio=twilio,
    )
