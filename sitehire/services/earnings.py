# sitehire/services/earnings.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..models.transaction import TransactionStatus
from ..store import Store

logger = logging.getLogger(__name__)

# target status -> statuses it may be reached from
TRANSACTION_TRANSITIONS = {
    TransactionStatus.COMPLETED.value: {TransactionStatus.PENDING.value},
    TransactionStatus.REFUNDED.value: {TransactionStatus.PENDING.value, TransactionStatus.COMPLETED.value},
}


def _total(transactions: List[dict], field: str) -> float:
    return round(sum(float(t.get(field) or 0) for t in transactions), 2)


def summarize_driver_earnings(transactions: List[dict], now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)
    completed = [t for t in transactions if t["status"] == TransactionStatus.COMPLETED.value]
    pending = [t for t in transactions if t["status"] == TransactionStatus.PENDING.value]

    return {
        "total_earnings": _total(completed, "driver_amount"),
        "weekly_earnings": _total([t for t in completed if t["created_at"] >= week_ago], "driver_amount"),
        "completed_jobs": len(completed),
        "pending_amount": _total(pending, "driver_amount"),
    }


def summarize_finances(transactions: List[dict]) -> dict:
    return {
        "total_balance": _total(transactions, "gross_amount"),
        "available_for_settle": _total(
            [t for t in transactions if t["status"] == TransactionStatus.COMPLETED.value], "driver_amount"
        ),
        "pending_clearance": _total(
            [t for t in transactions if t["status"] == TransactionStatus.PENDING.value], "gross_amount"
        ),
        "tax_provision": _total(transactions, "company_fee"),
    }


async def driver_earnings(store: Store, driver_id: str, now: Optional[datetime] = None) -> dict:
    return summarize_driver_earnings(await store.list_transactions(driver_id), now)


async def financial_summary(store: Store) -> dict:
    return summarize_finances(await store.list_transactions())


async def update_transaction_status(store: Store, transaction_id: str, status: str) -> dict:
    """Settle or refund a transaction"""
    allowed_from = TRANSACTION_TRANSITIONS.get(status)
    if allowed_from is None:
        raise ValidationError("status", f"Transactions cannot be moved to {status}")

    transaction = await store.get_transaction(transaction_id)
    if not transaction:
        raise NotFoundError("Transaction", transaction_id)
    if transaction["status"] not in allowed_from:
        raise InvalidStateError("Transaction", allowed_from, transaction["status"])

    updated = await store.transition_transaction(transaction["id"], allowed_from, status)
    if updated is None:
        latest = await store.get_transaction(transaction_id)
        raise InvalidStateError("Transaction", allowed_from, latest["status"])

    logger.info(f"Transaction {transaction_id} moved {transaction['status']} -> {status}")
    return updated
