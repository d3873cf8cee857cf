# sitehire/models/transaction.py
from pydantic import BaseModel
from datetime import datetime
from enum import Enum
from uuid import UUID

class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"

class TransactionOut(BaseModel):
    id: UUID
    booking_id: UUID
    driver_id: UUID
    customer_id: UUID
    gross_amount: float
    company_fee: float
    driver_amount: float
    status: TransactionStatus
    created_at: datetime

class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus

class DriverEarnings(BaseModel):
    total_earnings: float
    weekly_earnings: float
    completed_jobs: int
    pending_amount: float

class FinancialSummary(BaseModel):
    total_balance: float
    available_for_settle: float
    pending_clearance: float
    tax_provision: float
