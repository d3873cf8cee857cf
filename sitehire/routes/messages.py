# sitehire/routes/messages.py
from fastapi import APIRouter, Depends, status
from datetime import datetime
from typing import List, Optional

from ..database import get_store
from ..models.message import ConversationOut, MarkRead, MessageCreate, MessageOut
from ..services import conversations
from ..store import Store
from ..utils.auth import get_current_user

messages_router = APIRouter(prefix="/messages", tags=["Messages"])

@messages_router.post("/", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    message: MessageCreate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    return await conversations.send_message(
        store,
        sender_id=current_user["id"],
        booking_id=message.booking_id,
        recipient_id=message.recipient_id,
        content=message.content
    )

@messages_router.get("/conversations", response_model=List[ConversationOut])
async def get_conversations(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    return await conversations.get_user_conversations(store, current_user["id"])

@messages_router.get("/unread/count")
async def get_unread_message_count(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    count = await conversations.unread_count(store, current_user["id"])
    return {"count": count}

@messages_router.get("/{booking_id}", response_model=List[MessageOut])
async def get_conversation(
    booking_id: str,
    since: Optional[datetime] = None,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    return await conversations.get_conversation_messages(store, current_user["id"], booking_id, since)

@messages_router.put("/{booking_id}/read")
async def mark_conversation_read(
    booking_id: str,
    payload: MarkRead,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    updated = await conversations.mark_messages_as_read(
        store, current_user["id"], payload.sender_id, booking_id
    )
    return {"updated": updated}
