# sitehire/services/dashboard.py
from typing import List

from ..models.auth import UserRole, UserStatus
from ..models.booking import BookingStatus
from ..models.transaction import TransactionStatus
from ..store import Store


def summarize_dashboard(users: List[dict], bookings: List[dict], transactions: List[dict]) -> dict:
    """Headline numbers for the admin dashboard. Revenue is the platform's cut of unrefunded transactions."""
    return {
        "total_users": len(users),
        "active_drivers": sum(
            1 for u in users
            if u["role"] == UserRole.DRIVER.value and u["status"] == UserStatus.ACTIVE.value
        ),
        "completed_orders": sum(1 for b in bookings if b["status"] == BookingStatus.COMPLETED.value),
        "total_revenue": round(sum(
            float(t.get("company_fee") or 0) for t in transactions
            if t["status"] != TransactionStatus.REFUNDED.value
        ), 2),
    }


async def dashboard_stats(store: Store) -> dict:
    users = await store.list_users()
    completed = await store.list_bookings({BookingStatus.COMPLETED.value})
    transactions = await store.list_transactions()
    return summarize_dashboard(users, completed, transactions)
