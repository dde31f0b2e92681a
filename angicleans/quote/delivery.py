from __future__ import annotations

import asyncio
import enum
import logging
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import aiosmtplib

from angicleans.base.errors import DeliveryFailedError, ServiceUnavailableError
from angicleans.quote.document import BUSINESS_NAME, LOGO_CID, QuoteDocument
from angicleans.settings import Settings

logger = logging.getLogger(__name__)

SUBJECT = f"Your Quote from {BUSINESS_NAME}"

_TRANSPORT_ERRORS = (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError)


class DeliveryState(enum.Enum):
    IDLE = "idle"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    SENDING = "sending"
    SENT = "sent"
    SEND_FAILED = "send_failed"


class QuoteMailer:
    """
    Sends one quote email through the configured SMTP relay.

    The relay login is checked with `verify()` first; `send()` refuses to
    run until that has succeeded, so a dead relay never sees a message.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.state = DeliveryState.IDLE

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self._settings.smtp_host,
            port=self._settings.smtp_port,
            start_tls=True,
            timeout=self._settings.smtp_timeout,
        )

    async def verify(self) -> None:
        self.state = DeliveryState.VERIFYING
        try:
            smtp = self._client()
            async with smtp:
                await smtp.login(
                    self._settings.smtp_user, self._settings.smtp_password
                )
        except _TRANSPORT_ERRORS as exc:
            self.state = DeliveryState.VERIFICATION_FAILED
            logger.error("SMTP verification failed: %s", exc)
            raise ServiceUnavailableError() from exc
        self.state = DeliveryState.VERIFIED

    def build_message(self, document: QuoteDocument, recipient: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((BUSINESS_NAME, self._settings.smtp_user))
        msg["To"] = recipient
        msg["Cc"] = self._settings.business_email
        msg["Subject"] = SUBJECT
        msg["Message-ID"] = make_msgid(
            domain=_sender_domain(self._settings.smtp_user)
        )
        msg.set_content(document.html, subtype="html")

        if document.logo is not None:
            msg.make_related()
            msg.add_related(
                document.logo,
                maintype="image",
                subtype="png",
                cid=f"<{LOGO_CID}>",
                filename="logo.png",
                disposition="inline",
            )
        return msg

    async def send(self, document: QuoteDocument, recipient: str) -> str:
        """Send to `recipient` with the business copied. Returns the Message-ID."""
        if self.state is not DeliveryState.VERIFIED:
            raise RuntimeError(f"Cannot send from state {self.state.value}")

        msg = self.build_message(document, recipient)
        logger.info("Sending quote to %s (cc %s)", recipient, msg["Cc"])

        self.state = DeliveryState.SENDING
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_user,
                password=self._settings.smtp_password,
                start_tls=True,
                timeout=self._settings.smtp_timeout,
            )
        except _TRANSPORT_ERRORS as exc:
            self.state = DeliveryState.SEND_FAILED
            logger.exception("Failed to send quote to %s", recipient)
            raise DeliveryFailedError() from exc

        self.state = DeliveryState.SENT
        message_id = msg["Message-ID"]
        logger.info("Quote sent to %s: %s", recipient, message_id)
        return message_id


def _sender_domain(address: str) -> str | None:
    _, _, domain = address.rpartition("@")
    return domain or None
