import logging

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema
from twilio.rest import Client

from bookings import Booking
from catalog import format_date, get_time_slot
from config import Settings

logger = logging.getLogger(__name__)


def mail_config(settings: Settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
    )


def slot_label(booking: Booking) -> str:
    slot = get_time_slot(booking.time_slot)
    return slot.time if slot else booking.time_slot


def render_booking_email(booking: Booking, university: str) -> str:
    return f"""
    <html>
    <body>
        <h2>Dear {booking.booker_name},</h2>
        <p>Your booking for <b>{booking.venue_name}</b> on <b>{format_date(booking.booking_date)}</b>,
        {slot_label(booking)}, has been submitted for approval.</p>
        <p>Purpose: {booking.purpose}</p>
        <p>Status: {booking.status.value}</p>
        <hr>
        <p>{university} Venue Booking System</p>
    </body>
    </html>
    """


def render_approver_message(booking: Booking) -> str:
    return (
        f"New booking request {booking.id}\n"
        f"{booking.venue_name}, {format_date(booking.booking_date)}, {slot_label(booking)}\n"
        f"{booking.booker_name} ({booking.department}): {booking.purpose}"
    )


async def send_booking_confirmation(booking: Booking, settings: Settings):
    if not settings.mail_enabled or not booking.contact_email:
        return

    message = MessageSchema(
        subject="Venue booking submitted",
        recipients=[booking.contact_email],
        body=render_booking_email(booking, settings.UNIVERSITY_NAME),
        subtype="html"
    )
    try:
        await FastMail(mail_config(settings)).send_message(message)
    except Exception:
        # the booking stands even if the mail could not go out
        logger.exception("Failed to send confirmation for booking %s", booking.id)


def notify_approver(booking: Booking, settings: Settings):
    if not settings.whatsapp_enabled:
        return

    client = Client(settings.TWILIO_SID, settings.TWILIO_AUTH_TOKEN)
    try:
        client.messages.create(
            body=render_approver_message(booking),
            from_=f"whatsapp:{settings.TWILIO_WHATSAPP_FROM}",
            to=f"whatsapp:{settings.APPROVER_WHATSAPP_TO}"
        )
    except Exception:
        logger.exception("Failed to alert approver about booking %s", booking.id)
