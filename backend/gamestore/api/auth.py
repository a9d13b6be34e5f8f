"""
Authentication API endpoints
- Login and current user
- User management (admin only)
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from gamestore.core.auth import TokenUser, get_current_user, require_admin
from gamestore.core.exceptions import NotFoundError, DuplicateError
from gamestore.domain.user import LoginRequest, UserCreate, UserUpdate, PasswordChange
from gamestore.services.auth_service import AuthService, InvalidCredentialsError, get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=8)


# =============================================================================
# Login / Current User
# =============================================================================

@router.post("/login")
async def login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    try:
        return service.login(credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )
    except Exception as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")


@router.get("/me")
async def get_current_user_info(
    current_user: TokenUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    try:
        user = service.get_user(int(current_user.id))
        return {**user.model_dump(), "permissions": user.permissions}
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.post("/me/change-password")
async def change_password(
    password_data: PasswordChange,
    current_user: TokenUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    try:
        service.change_password(
            int(current_user.id), password_data.current_password, password_data.new_password
        )
        return {"message": "Password changed successfully"}
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to change password: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to change password: {str(e)}")


# =============================================================================
# User Management Endpoints (Admin Only)
# =============================================================================

@router.get("/users")
async def list_users(
    user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    users = service.list_users()
    return {
        "status": "success",
        "count": len(users),
        "data": [u.model_dump() for u in users]
    }


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    try:
        return {
            "status": "success",
            "data": service.create_user(user_data).model_dump()
        }
    except DuplicateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create user: {str(e)}")


@router.patch("/users/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_user(user_id, user_data).model_dump()
        }
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update user: {str(e)}")


@router.post("/users/{user_id}/reset-password")
async def reset_user_password(
    user_id: int,
    password_data: PasswordReset,
    current_user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    if str(user_id) == current_user.id:
        raise HTTPException(
            status_code=400,
            detail="Use /me/change-password to change your own password"
        )

    try:
        service.reset_password(user_id, password_data.new_password)
        return {"message": "Password reset successfully"}
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception as e:
        logger.error(f"Failed to reset password: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to reset password: {str(e)}")


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    try:
        service.delete_user(user_id, int(current_user.id))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete user: {str(e)}")
