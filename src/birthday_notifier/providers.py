from __future__ import annotations

import logging
from typing import Any, Protocol

import requests
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from birthday_notifier.errors import ConfigurationError, SendError
from birthday_notifier.models import OutboundMessage, TemplateInfo
from birthday_notifier.settings import PROVIDER_TWILIO, PROVIDER_WHATSAPP, Settings

LOGGER = logging.getLogger(__name__)

GRAPH_API_ROOT = "https://graph.facebook.com"
HELLO_TEMPLATE = "hello_world"
HELLO_LANGUAGE = "en_US"


class MessageProvider(Protocol):
    def send(self, recipient: str, message: OutboundMessage) -> None:
        ...


def template_payload(recipient: str, message: OutboundMessage) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": recipient,
        "type": "template",
        "template": {
            "name": message.template_name,
            "language": {"code": message.language_code},
            "components": [
                {
                    "type": "body",
                    "parameters": [{"type": "text", "text": value} for value in message.parameters],
                }
            ],
        },
    }


class WhatsAppCloudProvider:
    """Template messages through the WhatsApp Cloud (Graph) API."""

    def __init__(
        self,
        phone_id: str,
        token: str,
        *,
        api_version: str = "v20.0",
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self._phone_id = phone_id
        self._token = token
        self._base_url = f"{GRAPH_API_ROOT}/{api_version}/{phone_id}"
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{self._base_url}/messages"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, target: str, payload: dict[str, Any] | None = None) -> requests.Response:
        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise SendError(target, str(exc)) from exc

        if response.status_code >= 300:
            LOGGER.debug("Graph API error body for %s: %s", target, response.text)
            raise SendError(target, f"meta status {response.status_code} {response.reason}")
        return response

    def send(self, recipient: str, message: OutboundMessage) -> None:
        self._request("POST", self.messages_url, recipient, template_payload(recipient, message))

    def send_hello(self, recipient: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient,
            "type": "template",
            "template": {
                "name": HELLO_TEMPLATE,
                "language": {"code": HELLO_LANGUAGE},
            },
        }
        self._request("POST", self.messages_url, recipient, payload)

    def _json_body(self, response: requests.Response, target: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise SendError(target, f"response body is not JSON: {exc}") from exc

    def check_credentials(self) -> dict[str, Any]:
        response = self._request("GET", self._base_url, self._phone_id)
        body = self._json_body(response, self._phone_id)
        if not isinstance(body, dict):
            raise SendError(self._phone_id, f"unexpected response body: {body!r}")
        return body

    def list_templates(self) -> list[TemplateInfo]:
        response = self._request("GET", f"{self._base_url}/message_templates", self._phone_id)
        body = self._json_body(response, self._phone_id)
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            return []

        templates: list[TemplateInfo] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            language = item.get("language")
            templates.append(
                TemplateInfo(
                    name=str(item.get("name", "")),
                    status=str(item.get("status", "")),
                    category=str(item.get("category", "")),
                    language=language if isinstance(language, str) else "unknown",
                )
            )
        return templates


class TwilioProvider:
    """Free-text messages through the Twilio gateway."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        channel: str = "whatsapp",
        client: Client | None = None,
    ) -> None:
        self._channel = channel
        self._from_number = self._address(from_number)
        self._client = client if client is not None else Client(account_sid, auth_token)

    def _address(self, number: str) -> str:
        if self._channel != "whatsapp" or number.startswith("whatsapp:"):
            return number
        return f"whatsapp:{number}"

    def send(self, recipient: str, message: OutboundMessage) -> None:
        try:
            self._client.messages.create(
                from_=self._from_number,
                to=self._address(recipient),
                body=message.text,
            )
        except TwilioRestException as exc:
            raise SendError(recipient, f"twilio status {exc.status} {exc.msg}") from exc
        except (TwilioException, requests.RequestException) as exc:
            raise SendError(recipient, str(exc)) from exc


def build_provider(settings: Settings) -> MessageProvider:
    if settings.provider == PROVIDER_WHATSAPP and settings.whatsapp is not None:
        return WhatsAppCloudProvider(
            settings.whatsapp.phone_id,
            settings.whatsapp.token,
            api_version=settings.whatsapp.api_version,
        )
    if settings.provider == PROVIDER_TWILIO and settings.twilio is not None:
        return TwilioProvider(
            settings.twilio.account_sid,
            settings.twilio.auth_token,
            settings.twilio.from_number,
            channel=settings.twilio.channel,
        )
    raise ConfigurationError(f"No credentials configured for provider {settings.provider!r}")
