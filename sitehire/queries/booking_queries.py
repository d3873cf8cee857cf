# sitehire/queries/booking_queries.py
from typing import Optional, Dict, Any, List, Iterable
import asyncpg

from .transaction_queries import create_transaction

async def create_booking(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> asyncpg.Record:
    """Create a new booking"""
    return await conn.fetchrow(
        """
        INSERT INTO bookings (
            customer_id, service_id, location, service_date,
            quantity, notes, status
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING *
        """,
        data["customer_id"], data["service_id"], data["location"], data["service_date"],
        data["quantity"], data["notes"], data["status"]
    )

async def get_booking_by_id(
    conn: asyncpg.Connection,
    booking_id: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow("SELECT * FROM bookings WHERE id = $1", booking_id)

async def get_customer_bookings(
    conn: asyncpg.Connection,
    customer_id: str
) -> List[asyncpg.Record]:
    return await conn.fetch(
        "SELECT * FROM bookings WHERE customer_id = $1 ORDER BY created_at DESC",
        customer_id
    )

async def get_driver_bookings(
    conn: asyncpg.Connection,
    driver_id: str
) -> List[asyncpg.Record]:
    return await conn.fetch(
        "SELECT * FROM bookings WHERE driver_id = $1 ORDER BY service_date ASC",
        driver_id
    )

async def get_bookings_by_status(
    conn: asyncpg.Connection,
    statuses: Optional[Iterable[str]] = None,
    limit: Optional[int] = None
) -> List[asyncpg.Record]:
    """All bookings, or those whose status is in statuses, newest first"""
    query = "SELECT * FROM bookings"
    params: List[Any] = []
    if statuses:
        params.append(list(statuses))
        query += " WHERE status = ANY($1::text[])"
    query += " ORDER BY created_at DESC"
    if limit:
        params.append(limit)
        query += f" LIMIT ${len(params)}"
    return await conn.fetch(query, *params)

async def update_booking_status_if(
    conn: asyncpg.Connection,
    booking_id: str,
    expected: Iterable[str],
    status: str,
    cancellation_reason: Optional[str] = None
) -> Optional[asyncpg.Record]:
    """Conditional status write. Returns None when the booking left the expected states."""
    return await conn.fetchrow(
        """
        UPDATE bookings
        SET status = $1,
            cancellation_reason = COALESCE($2, cancellation_reason),
            updated_at = NOW()
        WHERE id = $3 AND status = ANY($4::text[])
        RETURNING *
        """,
        status, cancellation_reason, booking_id, list(expected)
    )

async def complete_booking(
    conn: asyncpg.Connection,
    booking_id: str,
    expected: Iterable[str],
    transaction: Optional[Dict[str, Any]] = None
) -> Optional[tuple]:
    """Close out a booking and record its payout together.

    Both writes share one transaction, so a failed insert rolls the status
    change back and the booking can be completed again.
    """
    async with conn.transaction():
        booking = await update_booking_status_if(conn, booking_id, expected, "completed")
        if booking is None:
            return None
        recorded = None
        if transaction is not None:
            recorded = await create_transaction(conn, transaction)
    return booking, recorded
