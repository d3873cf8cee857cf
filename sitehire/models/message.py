# sitehire/models/message.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from uuid import UUID

class MessageCreate(BaseModel):
    booking_id: str
    recipient_id: str
    content: str = Field(..., max_length=4000)

class MessageOut(BaseModel):
    id: UUID
    booking_id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    is_read: bool
    created_at: datetime

class MarkRead(BaseModel):
    sender_id: str

class OtherUser(BaseModel):
    id: UUID
    full_name: str
    rating: float
    avatar_url: Optional[str] = None
    role: str
    job_title: str

class ConversationOut(BaseModel):
    booking_id: UUID
    other_user: OtherUser
    last_message: str
    last_message_time: str
    last_message_at: datetime
    unread_count: int
