"""Booking confirmation emails sent through Resend."""
from __future__ import annotations

import logging

import resend

logger = logging.getLogger(__name__)


class BookingMailer:
    """Sends the booking confirmation to the client.

    Built once by ``create_app`` and stored in ``app.extensions``. Without an
    API key the mailer is disabled and ``send_booking_confirmation`` only logs.
    """

    def __init__(self, api_key: str | None, from_email: str):
        self.api_key = api_key
        self.from_email = from_email

    @classmethod
    def from_config(cls, config) -> "BookingMailer":
        return cls(config.get("RESEND_API_KEY"), config["MAIL_FROM"])

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_confirmation(self, appointment, service) -> dict[str, object]:
        when = appointment.appointment_date.strftime("%A, %B %d, %Y at %I:%M %p")
        deposit = f"${appointment.deposit_amount:.2f}" if appointment.deposit_amount is not None else "n/a"
        html = (
            f"<h2>Your appointment request has been received</h2>"
            f"<p>Hi {appointment.client_name},</p>"
            f"<p>Thank you for booking <strong>{service.name}</strong> on {when}.</p>"
            f"<ul>"
            f"<li>Duration: {service.duration} minutes</li>"
            f"<li>Price: ${service.price:.2f}</li>"
            f"<li>Deposit: {deposit}</li>"
            f"</ul>"
            f"<p>We will confirm your booking shortly.</p>"
        )
        return {
            "from": self.from_email,
            "to": [appointment.client_email],
            "subject": f"Booking received: {service.name} on {appointment.appointment_date:%b %d, %Y}",
            "html": html,
        }

    def send_booking_confirmation(self, appointment, service) -> bool:
        if not self.enabled:
            logger.info("Email disabled, skipping confirmation for appointment %s", appointment.id)
            return False

        resend.api_key = self.api_key
        resend.Emails.send(self.build_confirmation(appointment, service))
        logger.info("Booking confirmation sent to %s", appointment.client_email)
        return True
