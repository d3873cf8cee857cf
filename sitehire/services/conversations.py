# sitehire/services/conversations.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ..errors import ForbiddenError, NotFoundError, ValidationError
from ..store import Store

logger = logging.getLogger(__name__)


def format_message_time(sent_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Display label for a message timestamp in the conversation list
    Args:
        sent_at: When the message was created
        now: Reference time, defaults to the current UTC time
    Returns:
        "14:05" for today, "Mon" within the last week, "Oct 3" otherwise
    """
    now = now or datetime.now(timezone.utc)
    if sent_at.tzinfo is None:
        sent_at = sent_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    sent_at = sent_at.astimezone(now.tzinfo)

    if sent_at.date() == now.date():
        return sent_at.strftime("%H:%M")
    if abs(now - sent_at) < timedelta(days=7):
        return sent_at.strftime("%a")
    return f"{sent_at:%b} {sent_at.day}"


def _other_user_summary(profile: dict) -> dict:
    role = profile.get("role")
    return {
        "id": profile["id"],
        "full_name": profile.get("full_name") or "Unknown User",
        "rating": float(profile.get("rating") or 0),
        "avatar_url": profile.get("avatar_url"),
        "role": role,
        "job_title": "Service Provider" if role == "driver" else "User",
    }


def build_conversations(
    user_id: str,
    messages: Iterable[dict],
    profiles: Dict[str, dict],
    now: Optional[datetime] = None
) -> List[dict]:
    """Group a user's messages into one conversation per booking.

    The counterpart of the latest message in a booking is the other party.
    Bookings whose counterpart has no profile are left out. The result is
    ordered by latest message, newest first.
    """
    user_id = str(user_id)
    threads: Dict[str, List[dict]] = {}
    for message in messages:
        threads.setdefault(message["booking_id"], []).append(message)

    conversations = []
    for booking_id, thread in threads.items():
        latest = max(thread, key=lambda m: m["created_at"])
        other_id = latest["recipient_id"] if latest["sender_id"] == user_id else latest["sender_id"]
        profile = profiles.get(other_id)
        if not profile:
            logger.warning(f"No profile for user {other_id} in booking {booking_id}, skipping conversation")
            continue

        conversations.append({
            "booking_id": booking_id,
            "other_user": _other_user_summary(profile),
            "last_message": latest["content"],
            "last_message_time": format_message_time(latest["created_at"], now),
            "last_message_at": latest["created_at"],
            "unread_count": sum(
                1 for m in thread if m["recipient_id"] == user_id and not m["is_read"]
            ),
        })

    conversations.sort(key=lambda c: c["last_message_at"], reverse=True)
    return conversations


async def get_user_conversations(store: Store, user_id: str, now: Optional[datetime] = None) -> List[dict]:
    messages = await store.list_user_messages(user_id)
    if not messages:
        return []

    counterpart_ids = {
        m["recipient_id"] if m["sender_id"] == str(user_id) else m["sender_id"]
        for m in messages
    }
    profiles = {p["id"]: p for p in await store.get_users(counterpart_ids)}
    return build_conversations(user_id, messages, profiles, now)


def _booking_parties(booking: dict) -> set:
    parties = {booking["customer_id"]}
    if booking.get("driver_id"):
        parties.add(booking["driver_id"])
    return parties


async def send_message(
    store: Store,
    sender_id: str,
    booking_id: str,
    recipient_id: str,
    content: Optional[str]
) -> dict:
    if content is None or not content.strip():
        raise ValidationError("content", "Message content cannot be empty")
    if str(sender_id) == str(recipient_id):
        raise ValidationError("recipient_id", "Cannot send a message to yourself")

    booking = await store.get_booking(booking_id)
    if not booking:
        raise NotFoundError("Booking", booking_id)

    parties = _booking_parties(booking)
    if str(sender_id) not in parties or str(recipient_id) not in parties:
        raise ForbiddenError("Both users must be parties to the booking")

    return await store.create_message({
        "sender_id": str(sender_id),
        "recipient_id": str(recipient_id),
        "booking_id": booking["id"],
        "content": content.strip(),
    })


async def get_conversation_messages(
    store: Store,
    user_id: str,
    booking_id: str,
    since: Optional[datetime] = None
) -> List[dict]:
    """Chronological thread; `since` limits it to messages created after that moment"""
    booking = await store.get_booking(booking_id)
    if not booking:
        raise NotFoundError("Booking", booking_id)
    return await store.list_conversation_messages(user_id, booking["id"], since)


async def mark_messages_as_read(store: Store, user_id: str, sender_id: str, booking_id: str) -> int:
    """Flag messages from sender to user in a booking as read. Safe to repeat."""
    updated = await store.mark_messages_read(str(user_id), str(sender_id), str(booking_id))
    if updated:
        logger.info(f"Marked {updated} messages read for {user_id} in booking {booking_id}")
    return updated


async def unread_count(store: Store, user_id: str) -> int:
    return await store.count_unread(user_id)
