"""
Admin authentication for the Gaming Store backend

The login endpoint issues HS256 access tokens signed with AUTH_SECRET;
routers depend on get_current_user / require_admin to read them back.
"""
from typing import Optional
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel

from .config import settings


bearer_scheme = HTTPBearer(auto_error=False)

# Higher level includes every lower one
ROLE_LEVELS = {
    "admin": 2,
    "user": 1,
}


class TokenUser(BaseModel):
    """Identity carried inside an access token"""
    id: str
    email: str
    name: Optional[str] = None
    role: str = "user"

    @classmethod
    def from_claims(cls, claims: dict) -> Optional["TokenUser"]:
        subject = claims.get("id") or claims.get("sub")
        if not subject or not claims.get("email"):
            return None
        return cls(
            id=str(subject),
            email=claims["email"],
            name=claims.get("name"),
            role=claims.get("role", "user"),
        )


def _signing_key() -> str:
    if not settings.AUTH_SECRET:
        raise ValueError("AUTH_SECRET is not configured")
    return settings.AUTH_SECRET


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    user_id,
    email: str,
    name: Optional[str] = None,
    role: str = "user",
    expires_minutes: Optional[int] = None
) -> str:
    """
    Sign a token for a store user.

    Claims: sub and id (the user id as a string), email, name, role,
    plus iat / exp as unix timestamps. Lifetime defaults to
    JWT_EXPIRE_MINUTES.
    """
    issued = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "id": str(user_id),
        "email": email,
        "name": name,
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    return jwt.encode(claims, _signing_key(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; any failure becomes a 401"""
    try:
        return jwt.decode(
            token,
            _signing_key(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> TokenUser:
    """
    Resolve the caller from the Authorization header.

        @router.get("/me")
        async def me(user: TokenUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    user = TokenUser.from_claims(decode_access_token(credentials.credentials))
    if user is None:
        raise _unauthorized("Invalid token payload: missing user id or email")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[TokenUser]:
    """Same as get_current_user, but anonymous or broken tokens give None"""
    if credentials is None:
        return None
    try:
        return TokenUser.from_claims(decode_access_token(credentials.credentials))
    except HTTPException:
        return None


def require_role(required_role: str):
    """Dependency factory that rejects callers below required_role with 403"""
    needed = ROLE_LEVELS.get(required_role, 0)

    async def role_checker(user: TokenUser = Depends(get_current_user)) -> TokenUser:
        if ROLE_LEVELS.get(user.role, 0) < needed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {required_role}, your role: {user.role}"
            )
        return user

    return role_checker


require_admin = require_role("admin")
