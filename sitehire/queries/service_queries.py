# sitehire/queries/service_queries.py
from typing import Optional, Dict, Any, List
import asyncpg

async def create_service(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> asyncpg.Record:
    return await conn.fetchrow(
        """
        INSERT INTO services (
            name, description, category, image_url, base_price,
            price_type, is_instant_booking, is_available_today, platform_fee
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        RETURNING *
        """,
        data["name"], data.get("description", ""), data["category"], data.get("image_url"),
        data["base_price"], data["price_type"], data.get("is_instant_booking", False),
        data.get("is_available_today", False), data.get("platform_fee", 0)
    )

async def get_service_by_id(
    conn: asyncpg.Connection,
    service_id: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow("SELECT * FROM services WHERE id = $1", service_id)

async def get_services_by_ids(
    conn: asyncpg.Connection,
    service_ids: List[str]
) -> List[asyncpg.Record]:
    return await conn.fetch(
        "SELECT * FROM services WHERE id = ANY($1::uuid[])",
        service_ids
    )

async def search_services(
    conn: asyncpg.Connection,
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    instant_booking: Optional[bool] = None,
    available_today: Optional[bool] = None,
    limit: int = 12,
    offset: int = 0
) -> List[asyncpg.Record]:
    """Active services matching the catalog filters"""
    query = "SELECT * FROM services WHERE is_active = true"
    params: List[Any] = []

    if category:
        params.append(category)
        query += f" AND category = ${len(params)}"
    if search:
        params.append(f"%{search}%")
        query += f" AND name ILIKE ${len(params)}"
    if min_price is not None:
        params.append(min_price)
        query += f" AND base_price >= ${len(params)}"
    if max_price is not None:
        params.append(max_price)
        query += f" AND base_price <= ${len(params)}"
    if instant_booking is not None:
        params.append(instant_booking)
        query += f" AND is_instant_booking = ${len(params)}"
    if available_today is not None:
        params.append(available_today)
        query += f" AND is_available_today = ${len(params)}"

    params.extend([limit, offset])
    query += f" ORDER BY created_at DESC LIMIT ${len(params) - 1} OFFSET ${len(params)}"

    return await conn.fetch(query, *params)

async def set_service_active(
    conn: asyncpg.Connection,
    service_id: str,
    is_active: bool
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow(
        "UPDATE services SET is_active = $1 WHERE id = $2 RETURNING *",
        is_active, service_id
    )

EDITABLE_SERVICE_COLUMNS = (
    "name", "description", "image_url", "base_price", "price_type",
    "platform_fee", "is_instant_booking", "is_available_today", "is_active",
)

async def update_service(
    conn: asyncpg.Connection,
    service_id: str,
    changes: Dict[str, Any]
) -> Optional[asyncpg.Record]:
    """Partial update; keys outside EDITABLE_SERVICE_COLUMNS are ignored"""
    columns = [c for c in EDITABLE_SERVICE_COLUMNS if c in changes]
    if not columns:
        return await get_service_by_id(conn, service_id)

    assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
    return await conn.fetchrow(
        f"UPDATE services SET {assignments} WHERE id = $1 RETURNING *",
        service_id, *[changes[c] for c in columns]
    )
