"""Email service using SMTP (fastapi-mail) with notification templates."""

from typing import Any
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from pydantic import EmailStr

from shieldmate.core.config import get_settings
from shieldmate.models.user import User
from shieldmate.utils.logger import logger
from shieldmate.utils.validation import mask_email


# Email template definitions
EMAIL_TEMPLATES = {
    "application_received": {
        "subject": "New application - {mission_title}",
        "body": """
            <html><body>
            <h2>New Application</h2>
            <p>Hello {name},</p>
            <p>{volunteer_name} applied to your mission "{mission_title}".</p>
            <p><a href="{frontend_url}/mission/{mission_id}">Review applications</a></p>
            </body></html>
        """,
    },
    "application_accepted": {
        "subject": "Application accepted - {mission_title}",
        "body": """
            <html><body>
            <h2>Application Accepted</h2>
            <p>Hello {name},</p>
            <p>Your application for the mission "{mission_title}" has been accepted.</p>
            <p><a href="{frontend_url}/mission/{mission_id}">Open the mission</a></p>
            </body></html>
        """,
    },
    "closure_initiated": {
        "subject": "Mission completion review required - {mission_title}",
        "body": """
            <html><body>
            <h2>Mission Marked as Complete</h2>
            <p>Hello {name},</p>
            <p>The {initiator_type} has marked the mission "{mission_title}" as complete.</p>
            <p>Please confirm or dispute within 3 days. Without an answer the mission
            will be completed automatically.</p>
            <p><a href="{frontend_url}/mission/{mission_id}">Review the mission</a></p>
            </body></html>
        """,
    },
    "mission_auto_completed": {
        "subject": "Mission completed - {mission_title}",
        "body": """
            <html><body>
            <h2>Mission Completed</h2>
            <p>Hello {name},</p>
            <p>The mission "{mission_title}" has been automatically completed due to
            no response within 3 days.</p>
            <p><a href="{frontend_url}/mission/{mission_id}">Rate your experience</a></p>
            </body></html>
        """,
    },
}


def get_email_config() -> ConnectionConfig:
    """
    Create and return email configuration for FastMail.

    Raises:
        ValueError: If required email settings are not configured.
    """
    settings = get_settings()

    if not settings.SMTP_USER:
        raise ValueError("SMTP_USER is required for email functionality")
    if not settings.SMTP_PASSWORD:
        raise ValueError("SMTP_PASSWORD is required for email functionality")
    if not settings.SMTP_FROM_EMAIL:
        raise ValueError("SMTP_FROM_EMAIL is required for email functionality")

    return ConnectionConfig(
        MAIL_USERNAME=settings.SMTP_USER,
        MAIL_PASSWORD=settings.SMTP_PASSWORD.get_secret_value(),
        MAIL_FROM=settings.SMTP_FROM_EMAIL,
        MAIL_FROM_NAME=settings.SMTP_FROM_NAME,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


async def send_notification_email(
    template_name: str, recipient_email: EmailStr, context: dict[str, Any]
) -> None:
    """
    Send notification email using a template.

    Args:
        template_name: Name of the template from EMAIL_TEMPLATES
        recipient_email: Email address to send to
        context: Variables to format into the template

    Raises:
        ValueError: If template_name doesn't exist or email config is invalid
        Exception: If email sending fails
    """
    if template_name not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template: {template_name}")

    template = EMAIL_TEMPLATES[template_name]
    subject = template["subject"].format(**context)
    body = template["body"].format(**context)

    message = MessageSchema(
        subject=subject,
        recipients=[recipient_email],
        body=body,
        subtype=MessageType.html,
    )

    fm = FastMail(get_email_config())
    await fm.send_message(message)


async def send_mission_emails(
    template_name: str, recipients: list[User], context: dict[str, Any]
) -> int:
    """
    Send one templated email per recipient, never raising.

    Mails are skipped entirely when SMTP is not configured. `name` and
    `frontend_url` are added to the context for each recipient.

    Returns:
        int: Number of emails handed to the SMTP server.
    """
    settings = get_settings()
    if not settings.email_enabled:
        logger.debug(f"SMTP not configured, skipping '{template_name}' emails")
        return 0

    sent = 0
    for user in recipients:
        try:
            await send_notification_email(
                template_name=template_name,
                recipient_email=user.email,
                context={
                    **context,
                    "name": user.display_name,
                    "frontend_url": settings.FRONTEND_URL,
                },
            )
            sent += 1
        except Exception:
            logger.exception(
                f"Failed to send '{template_name}' email to {mask_email(user.email)}"
            )
    return sent
