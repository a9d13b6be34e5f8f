"""
Message Repository - Data Access Layer for contact form messages
"""
from datetime import date, datetime
from typing import List, Optional, Tuple, Dict, Any
import logging

from psycopg2.errors import UniqueViolation

from gamestore.domain.message import Message
from gamestore.domain.order import format_document_number
from gamestore.core.config import settings
from gamestore.core.database import get_db_connection_dict

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = """
    id, message_number, name, email, phone, subject, message, category,
    priority, status, is_read, read_at, replied_at, resolved_at,
    admin_notes, reply, created_at, updated_at
"""

NUMBER_ATTEMPTS = 3


class MessageRepository:
    """Repository for Message data access"""

    @staticmethod
    def _map_row_to_message(row: dict) -> Message:
        return Message(
            id=row['id'],
            message_number=row['message_number'],
            name=row['name'],
            email=row['email'],
            phone=row.get('phone'),
            subject=row['subject'],
            message=row['message'],
            category=row.get('category') or 'general',
            priority=row.get('priority') or 'medium',
            status=row.get('status') or 'unread',
            is_read=bool(row.get('is_read')),
            read_at=row.get('read_at'),
            replied_at=row.get('replied_at'),
            resolved_at=row.get('resolved_at'),
            admin_notes=row.get('admin_notes'),
            reply=row.get('reply'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def create(self, data: Dict[str, Any]) -> Message:
        """Insert a message with the next MSG-YYYY-NNNN number (status unread)"""
        prefix = settings.MESSAGE_NUMBER_PREFIX
        year = datetime.now().year

        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            conn = get_db_connection_dict()
            cursor = conn.cursor()

            try:
                cursor.execute("""
                    SELECT COALESCE(MAX(CAST(SPLIT_PART(message_number, '-', 3) AS INTEGER)), 0) as last_seq
                    FROM messages
                    WHERE message_number LIKE %s
                """, (f"{prefix}-{year}-%",))
                number = format_document_number(prefix, year, cursor.fetchone()['last_seq'] + 1)

                cursor.execute(f"""
                    INSERT INTO messages (
                        message_number, name, email, phone, subject, message,
                        category, priority, status, is_read, created_at, updated_at
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, 'unread', false, NOW(), NOW())
                    RETURNING {MESSAGE_COLUMNS}
                """, (
                    number,
                    data['name'],
                    data['email'],
                    data.get('phone'),
                    data['subject'],
                    data['message'],
                    data.get('category', 'general'),
                    data.get('priority', 'medium'),
                ))

                row = cursor.fetchone()
                conn.commit()
                return self._map_row_to_message(row)

            except UniqueViolation:
                conn.rollback()
                logger.warning(f"Message number collision on attempt {attempt}/{NUMBER_ATTEMPTS}, retrying")
                if attempt == NUMBER_ATTEMPTS:
                    raise

            except Exception:
                conn.rollback()
                raise

            finally:
                cursor.close()
                conn.close()

    def find_by_id(self, message_id: int) -> Optional[Message]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {MESSAGE_COLUMNS} FROM messages WHERE id = %s", (message_id,))
            row = cursor.fetchone()
            return self._map_row_to_message(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Message], int]:
        """
        Find messages with filters, newest first

        Args:
            search: Matches number, name, e-mail, subject and body

        Returns:
            Tuple of (list of messages, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if search:
                term = f"%{search.strip()}%"
                conditions.append("""(
                    message_number ILIKE %s OR name ILIKE %s OR email ILIKE %s
                    OR subject ILIKE %s OR message ILIKE %s
                )""")
                params.extend([term] * 5)

            for column, value in (('status', status), ('category', category), ('priority', priority)):
                if value:
                    conditions.append(f"{column} = %s")
                    params.append(value)

            if date_from:
                conditions.append("created_at::date >= %s")
                params.append(date_from)

            if date_to:
                conditions.append("created_at::date <= %s")
                params.append(date_to)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM messages
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {MESSAGE_COLUMNS}
                FROM messages
                WHERE {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            messages = [self._map_row_to_message(row) for row in cursor.fetchall()]
            return messages, total

        finally:
            cursor.close()
            conn.close()

    def _update_returning(self, set_clause: str, params: list, message_id: int) -> Optional[Message]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE messages
                SET {set_clause}, updated_at = NOW()
                WHERE id = %s
                RETURNING {MESSAGE_COLUMNS}
            """, params + [message_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_message(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def mark_as_read(self, message_id: int) -> Optional[Message]:
        """Unread messages become read; other statuses are kept"""
        return self._update_returning(
            """is_read = true,
               read_at = COALESCE(read_at, NOW()),
               status = CASE WHEN status = 'unread' THEN 'read' ELSE status END""",
            [],
            message_id
        )

    def mark_as_unread(self, message_id: int) -> Optional[Message]:
        return self._update_returning(
            "is_read = false, read_at = NULL, status = 'unread'",
            [],
            message_id
        )

    def update_status(self, message_id: int, status: str) -> Optional[Message]:
        """Set status; resolved stamps resolved_at, anything but unread marks as read"""
        return self._update_returning(
            """status = %s,
               is_read = (%s <> 'unread'),
               read_at = CASE WHEN %s = 'unread' THEN NULL ELSE COALESCE(read_at, NOW()) END,
               resolved_at = CASE WHEN %s = 'resolved' THEN NOW() ELSE resolved_at END""",
            [status, status, status, status],
            message_id
        )

    def add_reply(self, message_id: int, reply: str) -> Optional[Message]:
        return self._update_returning(
            """reply = %s, status = 'replied', replied_at = NOW(),
               is_read = true, read_at = COALESCE(read_at, NOW())""",
            [reply],
            message_id
        )

    def set_admin_notes(self, message_id: int, notes: str) -> Optional[Message]:
        return self._update_returning("admin_notes = %s", [notes], message_id)

    def delete(self, message_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM messages WHERE id = %s RETURNING id", (message_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> Dict[str, int]:
        """Total, per status, high priority and urgent counts"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total,
                    COUNT(*) FILTER (WHERE status = 'unread') as unread,
                    COUNT(*) FILTER (WHERE status = 'read') as read,
                    COUNT(*) FILTER (WHERE status = 'replied') as replied,
                    COUNT(*) FILTER (WHERE status = 'resolved') as resolved,
                    COUNT(*) FILTER (WHERE status = 'archived') as archived,
                    COUNT(*) FILTER (WHERE priority = 'high') as high_priority,
                    COUNT(*) FILTER (WHERE priority = 'urgent') as urgent
                FROM messages
            """)
            return dict(cursor.fetchone())

        finally:
            cursor.close()
            conn.close()
