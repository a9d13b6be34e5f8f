"""
Contact messages: public submission and admin triage
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from gamestore.core.exceptions import NotFoundError
from gamestore.core.security import sanitize_input, is_valid_email, is_valid_phone
from gamestore.domain.message import Message, MessageCreate, MESSAGE_STATUSES
from gamestore.repositories.message_repository import MessageRepository
from gamestore.services.notification_service import NotificationService, get_notification_service

logger = logging.getLogger(__name__)


def validate_contact_form(form: MessageCreate) -> List[str]:
    """Length and format checks on already sanitized fields"""
    errors = []
    if not 2 <= len(form.name) <= 50:
        errors.append("Name must be between 2 and 50 characters")
    if not is_valid_email(form.email):
        errors.append("A valid email address is required")
    if form.phone and not is_valid_phone(form.phone):
        errors.append("Phone number is not valid")
    if not 5 <= len(form.subject) <= 100:
        errors.append("Subject must be between 5 and 100 characters")
    if not 10 <= len(form.message) <= 500:
        errors.append("Message must be between 10 and 500 characters")
    return errors


class MessageService:

    def __init__(
        self,
        message_repo: Optional[MessageRepository] = None,
        notifications: Optional[NotificationService] = None
    ):
        self.messages = message_repo or MessageRepository()
        self.notifications = notifications or get_notification_service()

    async def submit(self, form: MessageCreate) -> Message:
        """
        Store a contact form submission.

        Text fields are sanitized before validation; the admin e-mail is
        best effort.
        """
        clean = form.model_copy(update={
            'name': sanitize_input(form.name),
            'email': sanitize_input(form.email),
            'phone': sanitize_input(form.phone) or None,
            'subject': sanitize_input(form.subject),
            'message': sanitize_input(form.message),
        })

        errors = validate_contact_form(clean)
        if errors:
            raise ValueError("; ".join(errors))

        message = self.messages.create(clean.model_dump())
        logger.info(f"Contact message received: {message.message_number} ({message.category})")

        await self.notifications.send_contact_notification(
            message.name, message.email, message.subject, message.message
        )
        return message

    def get(self, message_id: int) -> Message:
        message = self.messages.find_by_id(message_id)
        if message is None:
            raise NotFoundError("Message", message_id)
        return message

    def search(
        self,
        query: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Message], int]:
        return self.messages.find_all(
            search=query, status=status, category=category, priority=priority,
            date_from=date_from, date_to=date_to, limit=limit, offset=offset
        )

    def _require(self, message: Optional[Message], message_id: int) -> Message:
        if message is None:
            raise NotFoundError("Message", message_id)
        return message

    def mark_as_read(self, message_id: int) -> Message:
        return self._require(self.messages.mark_as_read(message_id), message_id)

    def mark_as_unread(self, message_id: int) -> Message:
        return self._require(self.messages.mark_as_unread(message_id), message_id)

    def update_status(self, message_id: int, status: str) -> Message:
        if status not in MESSAGE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(MESSAGE_STATUSES)}")
        return self._require(self.messages.update_status(message_id, status), message_id)

    def archive(self, message_id: int) -> Message:
        return self.update_status(message_id, "archived")

    def add_reply(self, message_id: int, reply: str) -> Message:
        reply = reply.strip()
        if not reply:
            raise ValueError("Reply cannot be empty")
        return self._require(self.messages.add_reply(message_id, reply), message_id)

    def add_admin_notes(self, message_id: int, notes: str) -> Message:
        return self._require(self.messages.set_admin_notes(message_id, notes.strip()), message_id)

    def delete(self, message_id: int) -> None:
        if not self.messages.delete(message_id):
            raise NotFoundError("Message", message_id)

    def stats(self) -> dict:
        return self.messages.get_stats()


_service_instance: Optional[MessageService] = None


def get_message_service() -> MessageService:
    global _service_instance
    if _service_instance is None:
        _service_instance = MessageService()
    return _service_instance
