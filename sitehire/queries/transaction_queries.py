# sitehire/queries/transaction_queries.py
from typing import Optional, Dict, Any, List, Iterable
import asyncpg

async def create_transaction(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> asyncpg.Record:
    """Record the money owed for a completed booking"""
    return await conn.fetchrow(
        """
        INSERT INTO transactions (
            booking_id, driver_id, customer_id,
            gross_amount, company_fee, driver_amount, status
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING *
        """,
        data["booking_id"], data["driver_id"], data["customer_id"],
        data["gross_amount"], data["company_fee"], data["driver_amount"], data["status"]
    )

async def get_transaction_by_id(
    conn: asyncpg.Connection,
    transaction_id: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow("SELECT * FROM transactions WHERE id = $1", transaction_id)

async def get_transactions(
    conn: asyncpg.Connection,
    driver_id: Optional[str] = None
) -> List[asyncpg.Record]:
    query = "SELECT * FROM transactions"
    params = []
    if driver_id:
        query += " WHERE driver_id = $1"
        params.append(driver_id)
    query += " ORDER BY created_at DESC"
    return await conn.fetch(query, *params)

async def update_transaction_status_if(
    conn: asyncpg.Connection,
    transaction_id: str,
    expected: Iterable[str],
    status: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow(
        """
        UPDATE transactions SET status = $1
        WHERE id = $2 AND status = ANY($3::text[])
        RETURNING *
        """,
        status, transaction_id, list(expected)
    )
