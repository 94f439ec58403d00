from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Protocol

from src.adapters.email_client import MailMessage, NotificationError
from src.schemas.demo_request import REQUIRED_FIELDS, DemoRequest
from src.services.store import DemoRequestStore

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Demo request sent successfully"
EMAIL_FAILURE_MESSAGE = "Demo request saved, but email sending failed"


class MailSender(Protocol):
    def send(self, message: MailMessage):
        ...


class ValidationFailure(Exception):
    """A submission is missing one or more required fields."""

    def __init__(self, fields: List[str]) -> None:
        super().__init__("Missing required fields: " + ", ".join(fields))
        self.fields = fields


@dataclass
class DeliveryResult:
    recipient: str
    delivered: bool
    error: Optional[str] = None


@dataclass
class IntakeResult:
    record: DemoRequest
    company_notice: DeliveryResult
    confirmation: DeliveryResult

    @property
    def emails_sent(self) -> bool:
        return self.company_notice.delivered and self.confirmation.delivered

    @property
    def message(self) -> str:
        return SUCCESS_MESSAGE if self.emails_sent else EMAIL_FAILURE_MESSAGE

    @property
    def error(self) -> Optional[str]:
        errors = [
            result.error
            for result in (self.company_notice, self.confirmation)
            if not result.delivered and result.error
        ]
        return "; ".join(errors) or None


class DemoRequestService:
    """Validates a submission, stores it, then notifies staff and the requester."""

    def __init__(
        self,
        store: DemoRequestStore,
        email_client: MailSender,
        sender_email: str,
        company_email: str,
        brand_name: str = "StaffMa",
        support_email: str = "info@staffma.com",
    ) -> None:
        self._store = store
        self._email_client = email_client
        self._sender_email = sender_email
        self._company_email = company_email
        self._brand = brand_name
        self._support_email = support_email

    def submit(self, submission: Mapping[str, Optional[str]]) -> IntakeResult:
        fields = self.validate(submission)
        # PersistenceError propagates; nothing is sent for an unsaved request.
        record = self._store.create(fields)

        company_notice = self._deliver(self.build_company_notice(record), "company")
        confirmation = self._deliver(self.build_confirmation(record), "user confirmation")
        return IntakeResult(record=record, company_notice=company_notice, confirmation=confirmation)

    @staticmethod
    def validate(submission: Mapping[str, Optional[str]]) -> dict:
        cleaned = {}
        missing = []
        for name in REQUIRED_FIELDS:
            value = submission.get(name)
            if not isinstance(value, str) or not value.strip():
                missing.append(name)
                continue
            cleaned[name] = value.strip()
        if missing:
            raise ValidationFailure(missing)
        return cleaned

    def build_company_notice(self, record: DemoRequest) -> MailMessage:
        escaped = {name: html.escape(getattr(record, name)) for name in REQUIRED_FIELDS}
        body = (
            "<h2>New Demo Request</h2>"
            f"<p><strong>Name:</strong> {escaped['name']}</p>"
            f"<p><strong>Email:</strong> {escaped['email']}</p>"
            f"<p><strong>Phone:</strong> {escaped['phone']}</p>"
            f"<p><strong>Company:</strong> {escaped['company']}</p>"
            "<p><strong>Message:</strong></p>"
            f"<p>{escaped['message']}</p>"
        )
        text = "\n".join(
            [
                "New Demo Request",
                f"Name: {record.name}",
                f"Email: {record.email}",
                f"Phone: {record.phone}",
                f"Company: {record.company}",
                f"Message: {record.message}",
            ]
        )
        return MailMessage(
            sender_name=f"{self._brand} Demo Request",
            sender_email=self._sender_email,
            recipient=self._company_email,
            subject=f"New {self._brand} Demo Request",
            html=body,
            text=text,
        )

    def build_confirmation(self, record: DemoRequest) -> MailMessage:
        name = html.escape(record.name)
        body = (
            f"<h2>Thank you for your interest in {self._brand}!</h2>"
            f"<p>Dear {name},</p>"
            "<p>We have received your demo request and will contact you shortly to schedule "
            "a personalized demonstration of our platform.</p>"
            "<p>In the meantime, if you have any questions, please don't hesitate to contact us at "
            f"{self._support_email}</p>"
            f"<p>Best regards,<br>The {self._brand} Team</p>"
        )
        text = (
            f"Dear {record.name},\n\n"
            "We have received your demo request and will contact you shortly to schedule "
            "a personalized demonstration of our platform.\n\n"
            f"Questions? Contact us at {self._support_email}\n\n"
            f"Best regards,\nThe {self._brand} Team"
        )
        return MailMessage(
            sender_name=self._brand,
            sender_email=self._sender_email,
            recipient=record.email,
            subject=f"Thank you for requesting a {self._brand} demo",
            html=body,
            text=text,
        )

    def _deliver(self, message: MailMessage, label: str) -> DeliveryResult:
        logger.info("Sending %s email to %s: %s", label, message.recipient, message.subject)
        try:
            self._email_client.send(message)
        except NotificationError as exc:
            logger.error("Email Error (%s email to %s): %s", label, message.recipient, exc)
            return DeliveryResult(recipient=message.recipient, delivered=False, error=str(exc))
        logger.info("%s email sent successfully", label.capitalize())
        return DeliveryResult(recipient=message.recipient, delivered=True)
