"""
Contact Message Domain Model

Messages arrive from the public contact form and are triaged by admins
(read, replied, resolved, archived).
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


MESSAGE_CATEGORIES = ["general", "support", "complaint", "suggestion", "order_inquiry", "business"]
MESSAGE_PRIORITIES = ["low", "medium", "high", "urgent"]
MESSAGE_STATUSES = ["unread", "read", "replied", "resolved", "archived"]


class Message(BaseModel):
    """
    Message domain model

    Fields:
        message_number: MSG-YYYY-NNNN
        name / email / phone: Sender contact
        subject / message: Content (sanitized on submission)
        category: Topic picked in the form
        priority: Triage priority
        status: Workflow status
        is_read / read_at: Read tracking
        replied_at / resolved_at: Workflow timestamps
        admin_notes: Internal notes
        reply: Text of the answer sent to the customer
    """

    id: int
    message_number: str
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    category: str = "general"
    priority: str = "medium"
    status: str = "unread"
    is_read: bool = False
    read_at: Optional[datetime] = None
    replied_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    reply: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={datetime: lambda v: v.isoformat()}
    )

    @property
    def is_high_priority(self) -> bool:
        return self.priority in ("high", "urgent")

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['is_high_priority'] = self.is_high_priority
        return data


class MessageCreate(BaseModel):
    """
    Public contact form submission.

    Lengths are checked after sanitizing, in the message service.
    """
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    category: str = "general"
    priority: str = "medium"

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if v not in MESSAGE_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(MESSAGE_CATEGORIES)}")
        return v

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v: str) -> str:
        if v not in MESSAGE_PRIORITIES:
            raise ValueError(f"Priority must be one of: {', '.join(MESSAGE_PRIORITIES)}")
        return v


class MessageStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in MESSAGE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(MESSAGE_STATUSES)}")
        return v


class MessageReply(BaseModel):
    reply: str = Field(..., min_length=1, max_length=2000)


class MessageNotes(BaseModel):
    admin_notes: str = Field(..., max_length=2000)
