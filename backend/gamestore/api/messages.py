"""
Messages API Endpoints
Public contact form and admin inbox
"""
import logging
from datetime import date
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError
from gamestore.core.rate_limit import rate_limit_check, CONTACT_FORM_LIMIT
from gamestore.domain.message import MessageCreate, MessageStatusUpdate, MessageReply, MessageNotes
from gamestore.services.message_service import MessageService, get_message_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", status_code=201)
async def submit_message(
    form: MessageCreate,
    _: None = Depends(rate_limit_check(*CONTACT_FORM_LIMIT)),
    service: MessageService = Depends(get_message_service)
):
    """Contact form submission (public, rate limited)"""
    try:
        message = await service.submit(form)
        return {
            "status": "success",
            "data": {
                "message_number": message.message_number,
                "created_at": message.created_at.isoformat() if message.created_at else None,
            }
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error submitting message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error submitting message: {str(e)}")


@router.get("/")
async def get_messages(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        messages, total = service.search(
            query=search,
            status=status,
            category=category,
            priority=priority,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(messages),
            "data": [m.to_dict() for m in messages]
        }

    except Exception as e:
        logger.error(f"Error fetching messages: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching messages: {str(e)}")


@router.get("/stats")
async def get_message_stats(
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.stats()
        }

    except Exception as e:
        logger.error(f"Error fetching stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/{message_id}")
async def get_message(
    message_id: int,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.get(message_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching message: {str(e)}")


@router.post("/{message_id}/read")
async def mark_message_read(
    message_id: int,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.mark_as_read(message_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating message: {str(e)}")


@router.post("/{message_id}/unread")
async def mark_message_unread(
    message_id: int,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.mark_as_unread(message_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating message: {str(e)}")


@router.patch("/{message_id}/status")
async def update_message_status(
    message_id: int,
    body: MessageStatusUpdate,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_status(message_id, body.status).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating message: {str(e)}")


@router.post("/{message_id}/reply")
async def reply_to_message(
    message_id: int,
    body: MessageReply,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.add_reply(message_id, body.reply).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error replying to message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error replying to message: {str(e)}")


@router.put("/{message_id}/notes")
async def update_message_notes(
    message_id: int,
    body: MessageNotes,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.add_admin_notes(message_id, body.admin_notes).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating notes: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating notes: {str(e)}")


@router.post("/{message_id}/archive")
async def archive_message(
    message_id: int,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        return {
            "status": "success",
            "data": service.archive(message_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error archiving message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error archiving message: {str(e)}")


@router.delete("/{message_id}")
async def delete_message(
    message_id: int,
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        service.delete(message_id)
        return {
            "status": "success",
            "message": f"Message {message_id} deleted"
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting message: {str(e)}")
