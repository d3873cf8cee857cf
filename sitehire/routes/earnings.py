# sitehire/routes/earnings.py
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..database import get_store
from ..models.transaction import DriverEarnings, TransactionOut
from ..services import earnings
from ..store import Store
from ..utils.auth import get_current_user

earnings_router = APIRouter(prefix="/earnings", tags=["Earnings"])

@earnings_router.get("/me", response_model=DriverEarnings)
async def get_driver_earnings(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "driver":
        raise HTTPException(status_code=403, detail="Only drivers can access this endpoint")

    return await earnings.driver_earnings(store, current_user["id"])

@earnings_router.get("/me/transactions", response_model=List[TransactionOut])
async def get_driver_transactions(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "driver":
        raise HTTPException(status_code=403, detail="Only drivers can access this endpoint")

    return await store.list_transactions(current_user["id"])
