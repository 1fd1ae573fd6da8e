import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from tripmate.config import get_settings

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


@dataclass
class Recipient:
    phone: str
    message: str


@dataclass
class SendResult:
    phone: str
    success: bool
    sid: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BulkSendResult:
    successful: int = 0
    failed: int = 0
    results: list[SendResult] = field(default_factory=list)


def whatsapp_address(number: str) -> str:
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


class TwilioNotifier:
    """
    SMS / WhatsApp delivery through the Twilio Messages REST API.

    Never raises on delivery problems: every send reports success or failure
    per recipient, and an unconfigured account simply fails every send.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        sms_number: Optional[str] = None,
        whatsapp_number: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.account_sid = account_sid or settings.twilio_account_sid
        self.auth_token = auth_token or settings.twilio_auth_token
        self.sms_number = sms_number or settings.twilio_sms_number
        self.whatsapp_number = whatsapp_number or settings.twilio_whatsapp_number
        self.api_url = (api_url or settings.twilio_api_url).rstrip("/")
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

        if not self.account_sid or not self.auth_token:
            logger.warning("Twilio credentials not configured. SMS/WhatsApp messaging will not work.")

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                auth=(self.account_sid, self.auth_token),
                timeout=10.0,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _send(self, sender: Optional[str], to: str, body: str, channel: Channel) -> SendResult:
        if not self.is_configured or not sender:
            return SendResult(phone=to, success=False, error=f"Twilio {channel.value} not configured")

        if channel == Channel.WHATSAPP:
            sender, to_address = whatsapp_address(sender), whatsapp_address(to)
        else:
            to_address = to

        try:
            client = await self._get_client()
            response = await client.post(
                f"{self.api_url}/Accounts/{self.account_sid}/Messages.json",
                data={"From": sender, "To": to_address, "Body": body},
            )
            payload = response.json() if response.content else {}

            if response.status_code in (200, 201):
                return SendResult(phone=to, success=True, sid=payload.get("sid"))

            error = payload.get("message") or f"Twilio returned {response.status_code}"
            logger.error(f"Twilio {channel.value} to {to} failed: {error}")
            return SendResult(phone=to, success=False, error=error)

        except httpx.HTTPError as e:
            logger.warning(f"Could not reach Twilio for {to}: {e}")
            return SendResult(phone=to, success=False, error=str(e))
        except ValueError as e:
            logger.error(f"Unreadable Twilio response for {to}: {e}")
            return SendResult(phone=to, success=False, error="Invalid response from Twilio")

    async def send_sms(self, to: str, body: str) -> SendResult:
        return await self._send(self.sms_number, to, body, Channel.SMS)

    async def send_whatsapp(self, to: str, body: str) -> SendResult:
        return await self._send(self.whatsapp_number, to, body, Channel.WHATSAPP)

    async def send_bulk(self, recipients: list[Recipient], channel: Channel = Channel.SMS) -> BulkSendResult:
        """Send to everybody at once and tally the outcome."""
        send = self.send_whatsapp if channel == Channel.WHATSAPP else self.send_sms
        results = await asyncio.gather(*(send(r.phone, r.message) for r in recipients))

        successful = sum(1 for r in results if r.success)
        return BulkSendResult(
            successful=successful,
            failed=len(results) - successful,
            results=list(results),
        )


_notifier: Optional[TwilioNotifier] = None


def get_notifier() -> TwilioNotifier:
    global _notifier
    if _notifier is None:
        _notifier = TwilioNotifier()
    return _notifier


async def shutdown_notifier():
    global _notifier
    if _notifier is not None:
        await _notifier.close()
        _notifier = None
