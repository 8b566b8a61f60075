from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from fastapi_mail.schemas import MultipartSubtypeEnum
from app.config import settings
from app.schemas.common import ServiceResult
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from typing import NamedTuple, Optional
import logging
import time

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
)

# Subject, body line and badge colour per status
STATUS_MESSAGES = {
    "under_review": {
        "subject": "Application Under Review",
        "message": "Your scholarship application is now under review by our committee.",
        "color": "rgb(197,155,60)",
    },
    "approved": {
        "subject": "Application Approved - Congratulations!",
        "message": "Congratulations! Your scholarship application has been approved.",
        "color": "rgb(9,76,9)",
    },
    "rejected": {
        "subject": "Application Decision",
        "message": "After careful consideration, we are unable to award this scholarship at this time.",
        "color": "rgb(147,51,56)",
    },
    "awarded": {
        "subject": "Scholarship Awarded - Congratulations!",
        "message": "Congratulations! You have been awarded this scholarship.",
        "color": "rgb(9,76,9)",
    },
}


class EmailTemplate(NamedTuple):
    subject: str
    html: str
    text: str


def _status_info(status: str) -> dict:
    return STATUS_MESSAGES.get(status, {
        "subject": "Application Status Update",
        "message": f"Your application status has been updated to: {status}",
        "color": "rgb(78,61,30)",
    })


def format_amount(amount) -> str:
    value = float(amount)
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def _render(name: str, subject: str, **context) -> EmailTemplate:
    context.setdefault("organization", settings.ORGANIZATION_NAME)
    context.setdefault("organization_short", settings.ORGANIZATION_SHORT_NAME)
    html = env.get_template(f"{name}.html").render(subject=subject, **context)
    text = env.get_template(f"{name}.txt").render(subject=subject, **context)
    return EmailTemplate(subject=subject, html=html, text=text)


def render_application_confirmation(applicant_name: str, scholarship_name: str, application_id: str) -> EmailTemplate:
    return _render(
        "application_confirmation",
        f"Application Confirmed: {scholarship_name}",
        applicant_name=applicant_name,
        scholarship_name=scholarship_name,
        application_id=application_id,
    )


def render_status_change(applicant_name: str, scholarship_name: str, new_status: str, application_id: str) -> EmailTemplate:
    info = _status_info(new_status)
    return _render(
        "status_change",
        f"{info['subject']}: {scholarship_name}",
        applicant_name=applicant_name,
        scholarship_name=scholarship_name,
        application_id=application_id,
        new_status=new_status,
        status_label=new_status.replace("_", " ").upper(),
        status_message=info["message"],
        status_color=info["color"],
    )


def render_award_notification(applicant_name: str, scholarship_name: str, award_amount, application_id: str) -> EmailTemplate:
    amount = format_amount(award_amount)
    return _render(
        "award_notification",
        f"Scholarship Award: {scholarship_name} - ${amount}",
        applicant_name=applicant_name,
        scholarship_name=scholarship_name,
        application_id=application_id,
        award_amount=amount,
        header_color="rgb(9,76,9)",
    )


# Two configs: one for TLS (587), one for SSL (465). Built on demand so a
# missing mail server never breaks application start-up.
def _connection_config(ssl: bool) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.EMAIL_HOST_USER,
        MAIL_PASSWORD=settings.EMAIL_HOST_PASSWORD,
        MAIL_FROM=settings.EMAIL_FROM,
        MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
        MAIL_PORT=465 if ssl else settings.EMAIL_PORT,
        MAIL_SERVER=settings.EMAIL_HOST,
        MAIL_STARTTLS=not ssl,
        MAIL_SSL_TLS=ssl,
        USE_CREDENTIALS=bool(settings.EMAIL_HOST_USER),
        VALIDATE_CERTS=True,
        TEMPLATE_FOLDER=TEMPLATE_DIR,
    )


# 🔁 Central retry wrapper
async def send_email_with_retry(message: MessageSchema, subject: str, to_email: str) -> bool:
    """Try sending via TLS first, then SSL (465) if it fails"""
    try:
        fm = FastMail(_connection_config(ssl=False))
        await fm.send_message(message)
        logger.info(f"{subject} email sent to {to_email} via port {settings.EMAIL_PORT}")
        return True
    except Exception as e:
        logger.warning(f"Failed to send {subject} via port {settings.EMAIL_PORT}: {str(e)}")
        try:
            fm = FastMail(_connection_config(ssl=True))
            await fm.send_message(message)
            logger.info(f"{subject} email sent to {to_email} via port 465")
            return True
        except Exception as e2:
            logger.error(f"Failed to send {subject} email via both ports: {str(e2)}")
            return False


async def send_email(to_email: Optional[str], template: EmailTemplate) -> ServiceResult:
    """Deliver a rendered template. Never raises; the outcome is in the result."""
    if not to_email:
        logger.warning(f"Skipping '{template.subject}' email: no recipient address")
        return ServiceResult.fail("No recipient address")

    if not settings.email_enabled:
        message_id = f"simulated-{int(time.time() * 1000)}"
        logger.info(f"📧 [simulated] '{template.subject}' to {to_email} ({message_id})")
        return ServiceResult.ok({"message_id": message_id, "simulated": True})

    try:
        message = MessageSchema(
            subject=template.subject,
            recipients=[to_email],
            body=template.html,
            alternative_body=template.text,
            subtype="html",
            multipart_subtype=MultipartSubtypeEnum.alternative,
        )
    except Exception as e:
        logger.error(f"Failed to build '{template.subject}' email for {to_email}: {str(e)}")
        return ServiceResult.fail(f"Failed to build email: {str(e)}")

    sent = await send_email_with_retry(message, template.subject, to_email)
    if not sent:
        return ServiceResult.fail("Failed to send email")
    return ServiceResult.ok({"message_id": None, "simulated": False})


async def send_application_confirmation(to_email: str, applicant_name: str, scholarship_name: str,
                                        application_id: str) -> ServiceResult:
    template = render_application_confirmation(applicant_name, scholarship_name, application_id)
    return await send_email(to_email, template)


async def send_status_change_email(to_email: str, applicant_name: str, scholarship_name: str,
                                   new_status: str, application_id: str) -> ServiceResult:
    template = render_status_change(applicant_name, scholarship_name, new_status, application_id)
    return await send_email(to_email, template)


async def send_award_notification(to_email: str, applicant_name: str, scholarship_name: str,
                                  award_amount, application_id: str) -> ServiceResult:
    template = render_award_notification(applicant_name, scholarship_name, award_amount, application_id)
    return await send_email(to_email, template)
