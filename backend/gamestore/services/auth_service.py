"""
Back-office accounts: login, password changes and admin user management
"""
import logging
from typing import List, Optional

from passlib.context import CryptContext

from gamestore.core.auth import create_access_token
from gamestore.core.exceptions import NotFoundError
from gamestore.domain.user import UserResponse, UserCreate, UserUpdate, LoginResponse
from gamestore.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidCredentialsError(ValueError):
    """Wrong e-mail/password or disabled account"""


class AuthService:

    def __init__(self, user_repo: Optional[UserRepository] = None):
        self.users = user_repo or UserRepository()

    def login(self, email: str, password: str) -> LoginResponse:
        row = self.users.find_credentials(email)
        # Same message for unknown e-mail and wrong password
        if not row or not row.get('password_hash') or not pwd_context.verify(password, row['password_hash']):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentialsError("Invalid email or password")
        if not row.get('is_active'):
            raise InvalidCredentialsError("Account is disabled")

        self.users.touch_last_login(row['id'])
        token = create_access_token(row['id'], row['email'], row.get('name'), row.get('role') or 'user')
        logger.info(f"User logged in: {row['email']}")
        return LoginResponse(
            access_token=token,
            user={
                "id": row['id'],
                "email": row['email'],
                "name": row.get('name'),
                "role": row.get('role') or 'user',
            }
        )

    def get_user(self, user_id: int) -> UserResponse:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self) -> List[UserResponse]:
        return self.users.find_all()

    def create_user(self, user_in: UserCreate) -> UserResponse:
        user = self.users.create(
            user_in.email, pwd_context.hash(user_in.password), user_in.name, user_in.role
        )
        logger.info(f"User created: {user.email} ({user.role})")
        return user

    def update_user(self, user_id: int, user_in: UserUpdate) -> UserResponse:
        changes = user_in.model_dump(exclude_unset=True)
        if not changes:
            raise ValueError("No fields to update")
        user = self.users.update(user_id, changes)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        password_hash = self.users.find_password_hash(user_id)
        if password_hash is None:
            raise NotFoundError("User", user_id)
        if not pwd_context.verify(current_password, password_hash):
            raise ValueError("Current password is incorrect")
        self.users.set_password(user_id, pwd_context.hash(new_password))

    def reset_password(self, user_id: int, new_password: str) -> None:
        if not self.users.set_password(user_id, pwd_context.hash(new_password)):
            raise NotFoundError("User", user_id)
        logger.info(f"Password reset for user {user_id}")

    def delete_user(self, user_id: int, current_user_id: int) -> None:
        if user_id == current_user_id:
            raise ValueError("Cannot delete your own account")
        if not self.users.delete(user_id):
            raise NotFoundError("User", user_id)
        logger.info(f"User deleted: {user_id}")


_service_instance: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    global _service_instance
    if _service_instance is None:
        _service_instance = AuthService()
    return _service_instance
