from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"


class NotificationError(Exception):
    """Raised when the mail channel cannot deliver a message."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


@dataclass
class MailMessage:
    sender_name: str
    sender_email: str
    recipient: str
    subject: str
    html: str
    text: str = ""

    @property
    def sender(self) -> str:
        return formataddr((self.sender_name, self.sender_email))


@dataclass
class SmtpEmailClient:
    host: str
    port: int
    username: str = ""
    password: str = ""
    secure: bool = True
    starttls: bool = False
    timeout: float = 10.0

    def _connect(self) -> smtplib.SMTP:
        if not self.host:
            raise NotificationError("SMTP host is not configured")
        context = ssl.create_default_context()
        if self.secure:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.starttls and not self.secure:
                smtp.starttls(context=context)
            if self.username:
                smtp.login(self.username, self.password)
        except BaseException:
            smtp.close()
            raise
        return smtp

    def send(self, message: MailMessage) -> Dict[str, str]:
        try:
            envelope = EmailMessage()
            envelope["From"] = message.sender
            envelope["To"] = message.recipient
            envelope["Subject"] = message.subject
            envelope.set_content(message.text or message.subject)
            envelope.add_alternative(message.html, subtype="html")
        except ValueError as exc:
            raise NotificationError(f"Cannot build email to {message.recipient!r}: {exc}", exc) from exc

        try:
            with self._connect() as smtp:
                refused = smtp.send_message(envelope)
        except NotificationError:
            raise
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            raise NotificationError(f"SMTP delivery to {message.recipient} failed: {exc}", exc) from exc

        if refused:
            raise NotificationError(f"SMTP server refused recipients: {', '.join(refused)}")
        return {"recipient": message.recipient, "subject": message.subject}

    def verify(self) -> None:
        try:
            with self._connect() as smtp:
                smtp.noop()
        except NotificationError:
            raise
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP connection check failed: {exc}", exc) from exc


@dataclass
class SendGridEmailClient:
    api_key: str
    timeout: float = 10.0

    def send(self, message: MailMessage) -> Dict[str, Any]:
        if not self.api_key:
            raise NotificationError("Email client configured without API key")
        if not message.sender_email:
            raise NotificationError("Email client configured without sender email")

        content = []
        if message.text:
            content.append({"type": "text/plain", "value": message.text})
        content.append({"type": "text/html", "value": message.html})
        payload = {
            "personalizations": [
                {
                    "to": [{"email": message.recipient}],
                }
            ],
            "from": {"email": message.sender_email, "name": message.sender_name},
            "subject": message.subject,
            "content": content,
        }

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(SENDGRID_ENDPOINT, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NotificationError(f"SendGrid request failed: {exc}", exc) from exc
        if response.status_code not in (200, 202):
            raise NotificationError(
                f"Failed to send email via SendGrid (status {response.status_code}): {response.text}"
            )

        return {
            "status": response.status_code,
            "recipient": message.recipient,
            "subject": message.subject,
        }

    def verify(self) -> None:
        if not self.api_key:
            raise NotificationError("SendGrid API key is not configured")
        logger.debug("SendGrid transport has no connection check; API key present")
