"""
NITC Blogs — Outbound email

The auth service only needs ``send_signup`` / ``send_password_reset``; the
transport is chosen at startup. Delivery failures surface as
EmailDeliveryError so the caller can roll back the pending token.
"""
import asyncio
import html
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from nitc_blogs.core.config import Settings

logger = logging.getLogger(__name__)

SIGNUP_SUBJECT = "Email confirmation for NITC Blogs"
PASSWORD_RESET_SUBJECT = "Your password reset token (valid for only {minutes} minutes)"


class EmailDeliveryError(Exception):
    pass


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    text: str
    html: str


class EmailTransport(Protocol):
    async def deliver(self, message: OutboundEmail) -> None: ...


def redact(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class SmtpTransport:
    """smtplib in a worker thread so the event loop is never blocked."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.timeout = settings.SMTP_TIMEOUT_SECONDS
        self.sender = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM}>"

    def _send(self, message: OutboundEmail) -> None:
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = self.sender
        msg["To"] = message.to
        msg.set_content(message.text)
        msg.add_alternative(message.html, subtype="html")

        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)

    async def deliver(self, message: OutboundEmail) -> None:
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery to %s failed: %s", redact(message.to), exc)
            raise EmailDeliveryError(str(exc)) from exc
        logger.info("Email sent to %s (%s)", redact(message.to), message.subject)


class LogTransport:
    """Development transport: the log stands in for the mailbox."""

    async def deliver(self, message: OutboundEmail) -> None:
        logger.info("Email (not sent) to %s: %s", redact(message.to), message.subject)
        logger.debug("Email body:\n%s", message.text)


class Mailer:
    def __init__(self, transport: EmailTransport, settings: Settings):
        self.transport = transport
        self.client_url = settings.CLIENT_URL.rstrip("/")
        self.reset_ttl_minutes = settings.PASSWORD_RESET_TOKEN_TTL_MINUTES

    def signup_url(self, raw_token: str) -> str:
        return f"{self.client_url}/auth/confirmSignup/{raw_token}"

    def reset_url(self, raw_token: str) -> str:
        return f"{self.client_url}/auth/resetPassword/{raw_token}"

    @staticmethod
    def _compose(to: Recipient, subject: str, intro: str, url: str) -> OutboundEmail:
        text = f"Hi {to.first_name},\n\n{intro}\n\n{url}\n\nIf you didn't ask for this, please ignore this email."
        name, link = html.escape(to.first_name), html.escape(url)
        body = (
            f"<p>Hi {name},</p>"
            f"<p>{html.escape(intro)}</p>"
            f'<p><a href="{link}">{link}</a></p>'
            "<p>If you didn't ask for this, please ignore this email.</p>"
        )
        return OutboundEmail(to=to.email, subject=subject, text=text, html=body)

    async def send_signup(self, to: Recipient, raw_token: str) -> None:
        await self.transport.deliver(self._compose(
            to,
            SIGNUP_SUBJECT,
            "Welcome to NITC Blogs! Confirm your email address to activate your account:",
            self.signup_url(raw_token),
        ))

    async def send_password_reset(self, to: Recipient, raw_token: str) -> None:
        await self.transport.deliver(self._compose(
            to,
            PASSWORD_RESET_SUBJECT.format(minutes=self.reset_ttl_minutes),
            "Forgot your password? Set a new one here:",
            self.reset_url(raw_token),
        ))


def build_mailer(settings: Settings) -> Mailer:
    transport: EmailTransport = SmtpTransport(settings) if settings.SMTP_HOST else LogTransport()
    return Mailer(transport, settings)
