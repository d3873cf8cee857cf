# sitehire/queries/offer_queries.py
from typing import Optional, Dict, Any, List, Iterable
import asyncpg

async def create_offer(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> asyncpg.Record:
    return await conn.fetchrow(
        """
        INSERT INTO offers (booking_id, driver_id, offered_price, distance_km, status)
        VALUES ($1, $2, $3, $4, 'pending')
        RETURNING *
        """,
        data["booking_id"], data["driver_id"], data["offered_price"], data["distance_km"]
    )

async def get_offer_by_id(
    conn: asyncpg.Connection,
    offer_id: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow("SELECT * FROM offers WHERE id = $1", offer_id)

async def get_booking_offers(
    conn: asyncpg.Connection,
    booking_ids: List[str]
) -> List[asyncpg.Record]:
    """Offers for one or more bookings, cheapest first"""
    return await conn.fetch(
        """
        SELECT * FROM offers
        WHERE booking_id = ANY($1::uuid[])
        ORDER BY offered_price ASC, created_at ASC
        """,
        booking_ids
    )

async def accept_offer(
    conn: asyncpg.Connection,
    booking_id: str,
    offer_id: str,
    open_statuses: Iterable[str]
) -> Optional[tuple]:
    """Settle a booking on one offer.

    The booking row is only updated while it is still open and the offer is
    still pending, so of two concurrent accepts exactly one gets a row back.
    """
    async with conn.transaction():
        booking = await conn.fetchrow(
            """
            UPDATE bookings b
            SET status = 'offer_accepted',
                driver_id = o.driver_id,
                price = o.offered_price,
                updated_at = NOW()
            FROM offers o
            WHERE b.id = $1
              AND o.id = $2
              AND o.booking_id = b.id
              AND o.status = 'pending'
              AND b.status = ANY($3::text[])
            RETURNING b.*
            """,
            booking_id, offer_id, list(open_statuses)
        )
        if booking is None:
            return None

        offer = await conn.fetchrow(
            "UPDATE offers SET status = 'accepted' WHERE id = $1 RETURNING *",
            offer_id
        )
        await conn.execute(
            """
            UPDATE offers SET status = 'declined'
            WHERE booking_id = $1 AND id <> $2 AND status = 'pending'
            """,
            booking_id, offer_id
        )
    return offer, booking

async def decline_pending_offers(
    conn: asyncpg.Connection,
    booking_id: str
) -> List[asyncpg.Record]:
    return await conn.fetch(
        """
        UPDATE offers SET status = 'declined'
        WHERE booking_id = $1 AND status = 'pending'
        RETURNING *
        """,
        booking_id
    )
