import html
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from core.breaker import outbound_breaker
from core.settings import settings
from models.enums import ReminderType

logger = logging.getLogger(__name__)

SUBJECTS = {
    ReminderType.PAYMENT_DUE: "Rent Payment Reminder",
    ReminderType.PAYMENT_OVERDUE: "Rent Payment Overdue",
}


def build_reminder_message(
    email: str, name: str, reminder_type: ReminderType, body: str, house_title: str
) -> MIMEMultipart:
    html_content = f"""
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6;">
        <h2>{SUBJECTS[reminder_type]}</h2>
        <p>Hello {html.escape(name)},</p>
        <p>{html.escape(body)}</p>
        <p>Property: {html.escape(house_title)}</p>
        <p>Best regards,<br>Your Property Management Team</p>
    </body>
    </html>
    """

    message = MIMEMultipart("alternative")
    message["Subject"] = SUBJECTS[reminder_type]
    message["From"] = settings.EMAIL_USER or "no-reply@localhost"
    message["To"] = email
    message.attach(MIMEText(body, "plain"))
    message.attach(MIMEText(html_content, "html"))
    return message


async def send_rent_reminder_email(
    email: str,
    name: str,
    reminder_type: ReminderType,
    body: str,
    house_title: str,
) -> bool:
    if not settings.email_enabled:
        logger.info("Email not configured; skipping reminder to %s", email)
        return False

    message = build_reminder_message(email, name, reminder_type, body, house_title)

    async def handler():
        await aiosmtplib.send(
            message,
            hostname=settings.EMAIL_SERVER,
            port=settings.EMAIL_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASSWORD,
            start_tls=settings.EMAIL_USE_TLS,
        )
        return True

    return await outbound_breaker.call(handler)
