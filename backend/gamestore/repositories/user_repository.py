"""
User Repository - back-office accounts
"""
from typing import List, Optional, Dict, Any

from psycopg2.errors import UniqueViolation
from psycopg2.extras import RealDictCursor

from gamestore.domain.user import UserResponse
from gamestore.core.database import get_db_connection_with_retry
from gamestore.core.exceptions import DuplicateError


USER_COLUMNS = "id, email, name, role, is_active, created_at, last_login"


def get_db_cursor():
    """Get a connection (retrying on SSL drops) and a RealDictCursor"""
    conn = get_db_connection_with_retry()
    cursor = conn.cursor(cursor_factory=RealDictCursor)
    return conn, cursor


class UserRepository:
    """Repository for users; password hashes never leave this class except via find_credentials"""

    @staticmethod
    def _map_row_to_user(row: dict) -> UserResponse:
        return UserResponse(
            id=row['id'],
            email=row['email'],
            name=row.get('name'),
            role=row.get('role') or 'user',
            is_active=bool(row.get('is_active')),
            created_at=row.get('created_at'),
            last_login=row.get('last_login')
        )

    def find_all(self) -> List[UserResponse]:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY created_at DESC")
            return [self._map_row_to_user(row) for row in cursor.fetchall()]
        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, user_id: int) -> Optional[UserResponse]:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            row = cursor.fetchone()
            return self._map_row_to_user(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def find_credentials(self, email: str) -> Optional[Dict[str, Any]]:
        """Row including password_hash, for login and password changes"""
        conn, cursor = get_db_cursor()
        try:
            cursor.execute(
                f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE LOWER(email) = %s",
                (email.strip().lower(),)
            )
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def find_password_hash(self, user_id: int) -> Optional[str]:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute("SELECT password_hash FROM users WHERE id = %s", (user_id,))
            row = cursor.fetchone()
            return row['password_hash'] if row else None
        finally:
            cursor.close()
            conn.close()

    def create(self, email: str, password_hash: str, name: Optional[str], role: str) -> UserResponse:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute(f"""
                INSERT INTO users (email, password_hash, name, role, is_active, created_at, updated_at)
                VALUES (%s, %s, %s, %s, TRUE, NOW(), NOW())
                RETURNING {USER_COLUMNS}
            """, (email.strip().lower(), password_hash, name, role))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_user(row)
        except UniqueViolation:
            conn.rollback()
            raise DuplicateError("Email already registered")
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserResponse]:
        fields = [f for f in ('name', 'role', 'is_active') if changes.get(f) is not None]
        if not fields:
            return self.find_by_id(user_id)

        conn, cursor = get_db_cursor()
        try:
            cursor.execute(f"""
                UPDATE users
                SET {", ".join(f"{f} = %s" for f in fields)}, updated_at = NOW()
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, [changes[f] for f in fields] + [user_id])
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_user(row) if row else None
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def set_password(self, user_id: int, password_hash: str) -> bool:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute("""
                UPDATE users SET password_hash = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING id
            """, (password_hash, user_id))
            updated = cursor.fetchone() is not None
            conn.commit()
            return updated
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def touch_last_login(self, user_id: int) -> None:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute("UPDATE users SET last_login = NOW() WHERE id = %s", (user_id,))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, user_id: int) -> bool:
        conn, cursor = get_db_cursor()
        try:
            cursor.execute("DELETE FROM users WHERE id = %s RETURNING id", (user_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
