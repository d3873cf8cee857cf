# sitehire/queries/message_queries.py
from typing import Optional, Dict, Any, List
from datetime import datetime
import asyncpg

async def create_message(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> asyncpg.Record:
    return await conn.fetchrow(
        """
        INSERT INTO messages (sender_id, recipient_id, booking_id, content)
        VALUES ($1, $2, $3, $4)
        RETURNING *
        """,
        data["sender_id"], data["recipient_id"], data["booking_id"], data["content"]
    )

async def get_user_messages(
    conn: asyncpg.Connection,
    user_id: str
) -> List[asyncpg.Record]:
    """Every message the user sent or received, newest first"""
    return await conn.fetch(
        """
        SELECT * FROM messages
        WHERE sender_id = $1 OR recipient_id = $1
        ORDER BY created_at DESC
        """,
        user_id
    )

async def get_conversation_messages(
    conn: asyncpg.Connection,
    user_id: str,
    booking_id: str,
    since: Optional[datetime] = None
) -> List[asyncpg.Record]:
    query = """
        SELECT * FROM messages
        WHERE booking_id = $1
        AND (sender_id = $2 OR recipient_id = $2)
    """
    params: List[Any] = [booking_id, user_id]
    if since is not None:
        query += " AND created_at > $3"
        params.append(since)
    query += " ORDER BY created_at ASC"
    return await conn.fetch(query, *params)

async def mark_messages_read(
    conn: asyncpg.Connection,
    recipient_id: str,
    sender_id: str,
    booking_id: str
) -> List[asyncpg.Record]:
    return await conn.fetch(
        """
        UPDATE messages
        SET is_read = true
        WHERE recipient_id = $1 AND sender_id = $2 AND booking_id = $3 AND is_read = false
        RETURNING *
        """,
        recipient_id, sender_id, booking_id
    )

async def count_unread_messages(
    conn: asyncpg.Connection,
    user_id: str
) -> int:
    return await conn.fetchval(
        "SELECT COUNT(*) FROM messages WHERE recipient_id = $1 AND is_read = false",
        user_id
    )
