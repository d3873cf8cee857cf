# sitehire/queries/user_queries.py
from typing import Optional, Dict, Any, List
import asyncpg

USER_COLUMNS = """
    id, email, full_name, phone, role, status, rating, total_reviews,
    avatar_url, password_hash, license_number, vehicle_make, vehicle_model,
    vehicle_color, vehicle_plate, created_at
"""

async def create_user(
    conn: asyncpg.Connection,
    data: Dict[str, Any]
) -> Optional[asyncpg.Record]:
    """Insert a user of any role"""
    return await conn.fetchrow(
        f"""
        INSERT INTO users (
            email, full_name, phone, role, status, password_hash,
            license_number, vehicle_make, vehicle_model, vehicle_color, vehicle_plate
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        RETURNING {USER_COLUMNS}
        """,
        data["email"], data["full_name"], data.get("phone"), data["role"],
        data.get("status", "active"), data["password_hash"],
        data.get("license_number"), data.get("vehicle_make"), data.get("vehicle_model"),
        data.get("vehicle_color"), data.get("vehicle_plate")
    )

async def get_user_by_id(
    conn: asyncpg.Connection,
    user_id: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow(
        f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
        user_id
    )

async def get_user_by_email(
    conn: asyncpg.Connection,
    email: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow(
        f"SELECT {USER_COLUMNS} FROM users WHERE lower(email) = lower($1)",
        email
    )

async def get_users_by_ids(
    conn: asyncpg.Connection,
    user_ids: List[str]
) -> List[asyncpg.Record]:
    """Profiles for a batch of users, used for offer and chat summaries"""
    return await conn.fetch(
        f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY($1::uuid[])",
        user_ids
    )

async def update_user_status(
    conn: asyncpg.Connection,
    user_id: str,
    status: str
) -> Optional[asyncpg.Record]:
    return await conn.fetchrow(
        f"UPDATE users SET status = $1 WHERE id = $2 RETURNING {USER_COLUMNS}",
        status, user_id
    )

async def search_users(
    conn: asyncpg.Connection,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None
) -> List[asyncpg.Record]:
    """Admin user directory, newest first"""
    query = f"SELECT {USER_COLUMNS} FROM users WHERE true"
    params: List[Any] = []

    if role:
        params.append(role)
        query += f" AND role = ${len(params)}"
    if status:
        params.append(status)
        query += f" AND status = ${len(params)}"
    if search:
        params.append(f"%{search}%")
        query += f" AND (full_name ILIKE ${len(params)} OR email ILIKE ${len(params)})"

    query += " ORDER BY created_at DESC"
    return await conn.fetch(query, *params)
