"""
E-mail notifications through the EmailJS REST API

Every send returns True/False. Failures are logged and never raised so
that a checkout or a contact submission is not lost because mail is down.
"""
import logging
from typing import Optional, Dict, Any

import httpx

from gamestore.core.config import settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends admin and customer e-mails with a single EmailJS template"""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    @staticmethod
    def is_configured() -> bool:
        return bool(
            settings.EMAILJS_SERVICE_ID
            and settings.EMAILJS_TEMPLATE_ID
            and settings.EMAILJS_PUBLIC_KEY
        )

    async def send(self, template_params: Dict[str, Any]) -> bool:
        """POST one e-mail to EmailJS"""
        if not self.is_configured():
            logger.warning("EmailJS not configured. Email notification skipped.")
            return False

        payload = {
            "service_id": settings.EMAILJS_SERVICE_ID,
            "template_id": settings.EMAILJS_TEMPLATE_ID,
            "user_id": settings.EMAILJS_PUBLIC_KEY,
            "template_params": template_params,
        }
        if settings.EMAILJS_PRIVATE_KEY:
            payload["accessToken"] = settings.EMAILJS_PRIVATE_KEY

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(settings.EMAILJS_API_URL, json=payload)
                response.raise_for_status()
            logger.info(f"Email sent: {template_params.get('subject')}")
            return True

        except httpx.HTTPError as e:
            logger.error(f"Failed to send email '{template_params.get('subject')}': {e}")
            return False

    def _admin_params(self, subject: str, message: str, admin_email: Optional[str]) -> Dict[str, Any]:
        return {
            "to_email": admin_email or settings.ADMIN_NOTIFICATION_EMAIL,
            "to_name": "Store Administrator",
            "from_name": settings.STORE_NAME,
            "subject": subject,
            "message": message,
            "site_name": settings.STORE_NAME,
        }

    async def send_order_notification(
        self,
        order_number: str,
        customer_name: str,
        customer_email: str,
        total_amount: str,
        admin_email: Optional[str] = None
    ) -> bool:
        """Tell the admin a new order was placed"""
        message = (
            f"A new order has been placed on {settings.STORE_NAME}.\n\n"
            f"Order Details:\n"
            f"- Order: #{order_number}\n"
            f"- Customer: {customer_name}\n"
            f"- Email: {customer_email}\n"
            f"- Total Amount: {total_amount}\n\n"
            f"Please review the order in the admin dashboard."
        )
        return await self.send(
            self._admin_params(f"New Order Received - #{order_number}", message, admin_email)
        )

    async def send_order_confirmation(self, order_number: str, customer_name: str,
                                      customer_email: str, total_amount: str) -> bool:
        """Confirmation e-mail to the customer"""
        message = (
            f"Thank you for your order, {customer_name}!\n\n"
            f"Order number: #{order_number}\n"
            f"Total: {total_amount}\n\n"
            f"We will let you know as soon as it ships."
        )
        return await self.send({
            "to_email": customer_email,
            "to_name": customer_name,
            "from_name": settings.STORE_NAME,
            "subject": f"Order Confirmation - #{order_number}",
            "message": message,
            "site_name": settings.STORE_NAME,
        })

    async def send_contact_notification(
        self,
        name: str,
        email: str,
        subject: str,
        message: str,
        admin_email: Optional[str] = None
    ) -> bool:
        """Tell the admin a contact form message arrived"""
        body = (
            f"A new contact form submission has been received.\n\n"
            f"Contact Details:\n"
            f"- Name: {name}\n"
            f"- Email: {email}\n"
            f"- Subject: {subject}\n\n"
            f"Message:\n{message}\n\n"
            f"Please respond to the customer inquiry."
        )
        return await self.send(self._admin_params(f"Contact Form: {subject}", body, admin_email))

    async def send_custom(self, to_email: str, to_name: str, subject: str, message: str) -> bool:
        return await self.send({
            "to_email": to_email,
            "to_name": to_name,
            "from_name": settings.STORE_NAME,
            "subject": subject,
            "message": message,
            "site_name": settings.STORE_NAME,
        })

    async def test_configuration(self) -> bool:
        """Send a test e-mail to the admin address"""
        return await self.send(self._admin_params(
            "EmailJS Configuration Test",
            "This is a test email to verify EmailJS configuration.",
            None
        ))


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_service_instance: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    global _service_instance
    if _service_instance is None:
        _service_instance = NotificationService()
    return _service_instance
