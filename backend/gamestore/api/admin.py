"""
Admin API - back-office dashboard, AI chat and e-mail notifications
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Depends
from typing import Dict, Any, List, Literal
from pydantic import BaseModel, EmailStr, Field

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.config import settings
from gamestore.core.rate_limit import rate_limit_check, AI_GENERATION_LIMIT
from gamestore.services.ai.admin_chat_service import get_admin_chat_service
from gamestore.services.dashboard_service import DashboardService, get_dashboard_service
from gamestore.services.notification_service import NotificationService, get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    user: TokenUser = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
) -> Dict[str, Any]:
    """
    Dashboard figures

    Returns:
        products: totals by status/category and stock levels
        orders: counts per status and paid revenue
        messages: counts per status and priority
        low_stock: active products at or below the low stock threshold
        recent_orders: latest orders
    """
    try:
        return {
            "status": "success",
            "data": service.summary()
        }

    except Exception as e:
        logger.error(f"Error building dashboard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building dashboard: {str(e)}")


class CustomNotification(BaseModel):
    to_email: EmailStr
    to_name: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


@router.post("/notifications/custom")
async def send_custom_notification(
    body: CustomNotification,
    user: TokenUser = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service)
):
    """Send an e-mail through the store's EmailJS template; `sent` is False when delivery failed"""
    sent = await notifications.send_custom(body.to_email, body.to_name, body.subject, body.message)
    return {
        "status": "success",
        "data": {"sent": sent}
    }


@router.post("/notifications/test")
async def test_notifications(
    user: TokenUser = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service)
):
    return {
        "status": "success",
        "data": {
            "configured": notifications.is_configured(),
            "sent": await notifications.test_configuration(),
        }
    }


class ChatMessage(BaseModel):
    """A single message in the conversation history"""
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000, description="Admin's question")
    history: List[ChatMessage] = Field(default_factory=list, description="Conversation history")


@router.post("/chat")
def chat(
    request: ChatRequest,
    user: TokenUser = Depends(require_admin),
    _: None = Depends(rate_limit_check(*AI_GENERATION_LIMIT))
):
    """
    Answer a natural-language question about the store.

    Examples:
    - "كم طلب معلق لدينا؟"
    - "What were the best sellers this month?"
    - "صدّر الرسائل غير المقروءة"

    `actions` lists CSV exports the admin asked for, as download links.
    """
    try:
        logger.info(f"Admin chat request from {user.email}: {request.message[:50]}")
        chat_service = get_admin_chat_service()
        history = [{"role": m.role, "content": m.content} for m in request.history]
        result = chat_service.process_query(message=request.message, history=history)

        return {
            "status": "success",
            "data": {
                "response": result.response,
                "tools_used": result.tools_used,
                "actions": result.actions,
                "model": result.model,
                "usage": {
                    "input_tokens": result.input_tokens,
                    "output_tokens": result.output_tokens,
                    "total_tokens": result.input_tokens + result.output_tokens,
                    "estimated_cost_usd": result.estimated_cost_usd,
                    "context_messages": result.context_messages,
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }

    except ValueError as e:
        # API key not configured
        logger.error(f"Admin chat configuration error: {e}")
        raise HTTPException(status_code=500, detail="Chat service not configured. Please contact administrator.")

    except Exception as e:
        logger.error(f"Admin chat error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing chat: {str(e)}")


@router.get("/chat/health")
async def chat_health(user: TokenUser = Depends(require_admin)):
    configured = bool(settings.ANTHROPIC_API_KEY)
    return {
        "status": "healthy" if configured else "not_configured",
        "api_key_configured": configured,
        "model": settings.ADMIN_CHAT_MODEL,
    }
