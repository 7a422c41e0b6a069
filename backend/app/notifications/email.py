"""Booking e-mails: templates and delivery through the Resend API."""

import asyncio
import logging

import resend

from app.config import settings

logger = logging.getLogger(__name__)

TEMPLATES = {
    "booking_confirmation": {
        "subject": "Booking Confirmation - {court_name} on {booking_date}",
        "body": (
            "Dear {user_name},\n\n"
            "Your court booking has been confirmed.\n\n"
            "Booking Details:\n"
            "- Court: {court_name}\n"
            "- Date: {booking_date}\n"
            "- Time: {start_time} - {end_time}\n"
            "- Coach: {coach_name}\n"
            "- Membership: {membership_status}\n"
            "- Notes: {notes}\n\n"
            "See you on court!\n\n"
            "Best regards,\nCourt Booking System"
        ),
    },
    "admin_booking_notice": {
        "subject": "New Booking - {court_name} on {booking_date} {start_time}",
        "body": (
            "A new booking was made.\n\n"
            "- Booking ID: {booking_id}\n"
            "- Player: {user_name} <{user_email}> {user_phone}\n"
            "- Court: {court_name}\n"
            "- Date: {booking_date}\n"
            "- Time: {start_time} - {end_time}\n"
            "- Coach: {coach_name}\n"
            "- Membership: {membership_status}\n"
            "- Notes: {notes}\n"
        ),
    },
    "booking_cancellation": {
        "subject": "Booking Cancelled - {court_name} on {booking_date}",
        "body": (
            "Dear {user_name},\n\n"
            "Your booking for {court_name} on {booking_date} "
            "({start_time} - {end_time}) has been cancelled.\n\n"
            "If you have any questions, please don't hesitate to contact us.\n\n"
            "Best regards,\nCourt Booking System"
        ),
    },
}


def render(template: str, **values: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for a template filled with ``values``."""
    template_parts = TEMPLATES[template]
    return template_parts["subject"].format(**values), template_parts["body"].format(**values)


def is_configured() -> bool:
    return settings.notifications_enabled and bool(settings.resend_api_key)


async def send_email(to: str, subject: str, body: str) -> bool:
    """Send a plain-text e-mail. Returns ``False`` instead of raising on failure."""
    if not is_configured():
        logger.info("Email delivery not configured; skipping '%s' to %s", subject, to)
        return False

    resend.api_key = settings.resend_api_key
    params = {
        "from": settings.from_email,
        "to": [to],
        "subject": subject,
        "text": body,
    }
    try:
        # The Resend SDK is synchronous.
        await asyncio.to_thread(resend.Emails.send, params)
    except Exception:
        logger.exception("Failed to send email '%s' to %s", subject, to)
        return False

    logger.info("Email sent to %s: %s", to, subject)
    return True
