from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText
from typing import Protocol

import httpx
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Email, Mail

from .config import EmailSettings
from .models import EmailReport

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"

# Port on which the server expects TLS from the first byte
SMTP_SSL_PORT = 465


class MailError(Exception):
    """Raised when mail sending fails."""


class MailConfigError(MailError):
    """Raised when the email settings are not usable for delivery."""


class MailSender(Protocol):
    provider: str

    def send(self, report: EmailReport) -> None: ...


def render_html_body(report: EmailReport) -> str:
    return "\n".join(report.body)


class SMTPMailer:
    provider = "smtp"

    def __init__(self, settings: EmailSettings, smtp_factory=None):
        self._settings = settings
        self._implicit_tls = settings.port == SMTP_SSL_PORT
        if smtp_factory is None:
            smtp_factory = smtplib.SMTP_SSL if self._implicit_tls else smtplib.SMTP
        self._smtp_factory = smtp_factory

    def send(self, report: EmailReport) -> None:
        settings = self._settings
        if not settings.smtp_server:
            raise MailConfigError("no smtp server is configured")
        if not settings.port:
            raise MailConfigError("no port specified in email settings")

        message = MIMEText(render_html_body(report), "html", "utf-8")
        message["From"] = settings.from_email
        message["To"] = ", ".join(report.recipients)
        message["Subject"] = report.subject

        try:
            with self._smtp_factory(host=settings.smtp_server, port=settings.port) as client:
                client.ehlo()
                if not self._implicit_tls and client.has_extn("starttls"):
                    client.starttls()
                    client.ehlo()
                if settings.username:
                    client.login(settings.username, settings.password)
                client.sendmail(settings.from_email, list(report.recipients), message.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise MailError(f"Failed to send email: {exc}") from exc
        logger.info("Mail sent via %s:%s to %s recipients", settings.smtp_server, settings.port, len(report.recipients))


class SendGridMailer:
    provider = "sendgrid"

    def __init__(self, api_key: str, settings: EmailSettings):
        self._client = SendGridAPIClient(api_key)
        self._from_email = Email(email=settings.from_email)

    def send(self, report: EmailReport) -> None:
        mail = Mail(
            from_email=self._from_email,
            to_emails=list(report.recipients),
            subject=report.subject,
            html_content=render_html_body(report),
        )
        try:
            response = self._client.send(mail)
        except Exception as exc:  # noqa: BLE001
            raise MailError(f"Failed to send email: {exc}") from exc
        if response.status_code >= 400:
            raise MailError(f"SendGrid returned error status: {response.status_code}")
        logger.info("Mail sent with status %s", response.status_code)


class BrevoMailer:
    provider = "brevo"

    def __init__(self, api_key: str, settings: EmailSettings, http_client: httpx.Client | None = None):
        self._api_key = api_key
        self._settings = settings
        self._http_client = http_client

    def send(self, report: EmailReport) -> None:
        payload = {
            "sender": {"email": self._settings.from_email},
            "to": [{"email": recipient} for recipient in report.recipients],
            "subject": report.subject,
            "htmlContent": render_html_body(report),
        }
        headers = {"api-key": self._api_key, "content-type": "application/json"}
        try:
            if self._http_client is not None:
                response = self._http_client.post(BREVO_SEND_URL, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=20.0) as client:
                    response = client.post(BREVO_SEND_URL, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise MailError(f"Failed to send email: {exc}") from exc
        logger.info("Mail sent with status %s", response.status_code)


def build_mailer(settings: EmailSettings) -> MailSender:
    """
    Provider selection:
    - smtp (default) delivers through email_settings.smtp_server/port.
    - sendgrid / brevo deliver through their HTTP APIs and need an api_key.
    """
    if settings.provider == "smtp":
        return SMTPMailer(settings)
    api_key = (settings.api_key or "").strip()
    if not api_key:
        raise MailConfigError(f"No api_key configured for mail provider {settings.provider}.")
    if settings.provider == "sendgrid":
        return SendGridMailer(api_key, settings)
    if settings.provider == "brevo":
        return BrevoMailer(api_key, settings)
    raise MailConfigError(f"Unknown mail provider: {settings.provider}")
