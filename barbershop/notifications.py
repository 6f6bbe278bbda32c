"""
This module contains the notification channels used to reach customers.

Each channel implements ``Notification.send`` and is selected by its string key through
``NotificationFactory``. A message is a dict with ``recipient``, ``subject`` and ``body``; a
result is a dict with ``success`` and either ``messageId`` or ``error``.
"""
import logging
import smtplib
import uuid
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import TypedDict

from . import config
from .errors import UnsupportedChannel

logger = logging.getLogger(__name__)

SENDER_NAME = "Barbershop Reservations"


class NotificationMessage(TypedDict):
    recipient: str
    subject: str
    body: str


class Notification:
    """Base class for a notification channel."""

    channel = ""

    def send(self, message: NotificationMessage) -> dict:
        raise NotImplementedError


class EmailNotification(Notification):
    """
    Sends HTML email over SMTP with STARTTLS.

    Without SMTP credentials the message is only logged, which keeps local development usable.
    """

    channel = "email"

    def send(self, message: NotificationMessage) -> dict:
        message_id = make_msgid(domain="barbershop.local")
        if not config.SMTP_USER or not config.SMTP_PASS:
            logger.info(f"[email] SMTP not configured, would send '{message['subject']}' to {message['recipient']}")
            return {"success": True, "messageId": message_id}

        msg = MIMEText(self.build_template(message["body"]), "html", "utf-8")
        msg["Subject"] = message["subject"]
        msg["From"] = formataddr((SENDER_NAME, config.EMAIL_FROM_ADDRESS))
        msg["To"] = message["recipient"]
        msg["Message-ID"] = message_id

        try:
            with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as server:
                server.starttls()
                server.login(config.SMTP_USER, config.SMTP_PASS)
                server.sendmail(config.EMAIL_FROM_ADDRESS, [message["recipient"]], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Email to {message['recipient']} failed: {exc}")
            return {"success": False, "error": str(exc)}

        logger.info(f"Email sent: {message_id}")
        return {"success": True, "messageId": message_id}

    @staticmethod
    def build_template(body: str) -> str:
        return f"""<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #007bff; color: white; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; background: #f9f9f9; }}
    .footer {{ text-align: center; padding: 10px; color: #666; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>Barbershop Reservation</h1></div>
    <div class="content">{body}</div>
    <div class="footer"><p>Thank you for choosing our barbershop!</p></div>
  </div>
</body>
</html>
"""


class SMSNotification(Notification):
    """Simulated SMS channel."""

    channel = "sms"

    def send(self, message: NotificationMessage) -> dict:
        logger.info(f"[sms] to {message['recipient']}: {message['subject']}")
        return {"success": True, "messageId": f"sms-{uuid.uuid4()}"}


class PushNotification(Notification):
    """Simulated push channel."""

    channel = "push"

    def send(self, message: NotificationMessage) -> dict:
        logger.info(f"[push] to {message['recipient']}: {message['subject']}")
        return {"success": True, "messageId": f"push-{uuid.uuid4()}"}


class NotificationFactory:
    """
    Creates notification channels by key.
    """

    channels: dict[str, type[Notification]] = {
        EmailNotification.channel: EmailNotification,
        SMSNotification.channel: SMSNotification,
        PushNotification.channel: PushNotification,
    }

    @classmethod
    def create(cls, channel: str) -> Notification:
        """
        Args:
            channel (str): The channel key, case insensitive.

        Raises:
            UnsupportedChannel: If no channel is registered under the key.
        """
        try:
            return cls.channels[channel.lower()]()
        except KeyError:
            raise UnsupportedChannel(f"Unsupported notification type: {channel}") from None

    @classmethod
    def send(cls, channel: str, message: NotificationMessage) -> dict:
        """
        Sends a message through a channel. Never raises; failures are logged and returned.
        """
        try:
            return cls.create(channel).send(message)
        except UnsupportedChannel as exc:
            logger.error(f"Notification failed: {exc}")
            return {"success": False, "error": str(exc)}


def confirmation_message(reservation) -> NotificationMessage:
    """Builds the booking confirmation sent after a reservation is created."""
    return {
        "recipient": reservation.customer_email,
        "subject": "Reservation Confirmed",
        "body": (
            f"<h2>Hello {reservation.customer_name}!</h2>"
            "<p>Your reservation has been received.</p>"
            "<ul>"
            f"<li><strong>Service:</strong> {reservation.service_type}</li>"
            f"<li><strong>Barber:</strong> {reservation.barber_name}</li>"
            f"<li><strong>Date:</strong> {reservation.appointment_date.isoformat()}</li>"
            f"<li><strong>Time:</strong> {reservation.appointment_time.strftime('%H:%M:%S')}</li>"
            f"<li><strong>Price:</strong> ${reservation.price:.2f}</li>"
            "</ul>"
            "<p>We look forward to seeing you!</p>"
        ),
    }


def cancellation_message(reservation) -> NotificationMessage:
    return {
        "recipient": reservation.customer_email,
        "subject": "Reservation Cancelled",
        "body": (
            f"<h2>Hello {reservation.customer_name}!</h2>"
            "<p>Your reservation has been cancelled.</p>"
            "<p>If you'd like to reschedule, please book a new appointment.</p>"
        ),
    }
