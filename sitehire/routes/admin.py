# sitehire/routes/admin.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from ..database import get_store
from ..errors import NotFoundError
from ..models.admin import DashboardStats
from ..models.auth import DriverCreate, UserOut, UserRole, UserStatus, UserStatusUpdate
from ..models.booking import BookingOut, BookingStatus
from ..models.service import ServiceActiveUpdate, ServiceCreate, ServiceOut, ServiceUpdate
from ..models.transaction import FinancialSummary, TransactionOut, TransactionStatusUpdate
from ..services import dashboard, earnings, lifecycle
from ..store import Store
from ..utils.auth import get_current_user, get_password_hash, public_profile

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

async def get_admin_user(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user["role"] != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user

@admin_router.get("/bookings", response_model=List[BookingOut])
async def get_all_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    return await lifecycle.list_all_bookings(
        store, booking_status.value if booking_status else None
    )

@admin_router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    return await dashboard.dashboard_stats(store)

@admin_router.get("/users", response_model=List[UserOut])
async def get_users(
    role: Optional[UserRole] = None,
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    users = await store.list_users(
        role=role.value if role else None,
        status=user_status.value if user_status else None,
        search=search
    )
    return [public_profile(u) for u in users]

@admin_router.get("/drivers", response_model=List[UserOut])
async def get_drivers(
    driver_status: Optional[UserStatus] = Query(None, alias="status"),
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    drivers = await store.list_users(
        role=UserRole.DRIVER.value,
        status=driver_status.value if driver_status else None
    )
    return [public_profile(d) for d in drivers]

@admin_router.post("/drivers", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def add_driver(
    driver: DriverCreate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    if await store.get_user_by_email(driver.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    data = driver.dict(exclude={"password"})
    user = await store.create_user({
        **data,
        "role": UserRole.DRIVER.value,
        "status": "active",
        "password_hash": get_password_hash(driver.password)
    })
    return public_profile(user)

@admin_router.put("/users/{user_id}/status", response_model=UserOut)
async def update_user_status(
    user_id: str,
    status_update: UserStatusUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    if str(user_id) == str(admin["id"]):
        raise HTTPException(status_code=400, detail="Admins cannot change their own status")

    user = await store.update_user_status(user_id, status_update.status.value)
    if not user:
        raise NotFoundError("User", user_id)
    return public_profile(user)

@admin_router.post("/services", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
async def create_service(
    service: ServiceCreate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    data = service.dict()
    data["category"] = service.category.value
    data["price_type"] = service.price_type.value
    return await store.create_service(data)

@admin_router.put("/services/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: str,
    update: ServiceUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    changes = update.dict(exclude_unset=True, exclude_none=True)
    if "price_type" in changes:
        changes["price_type"] = update.price_type.value

    service = await store.update_service(service_id, changes)
    if not service:
        raise NotFoundError("Service", service_id)
    return service

@admin_router.put("/services/{service_id}/active", response_model=ServiceOut)
async def set_service_active(
    service_id: str,
    update: ServiceActiveUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    service = await store.set_service_active(service_id, update.is_active)
    if not service:
        raise NotFoundError("Service", service_id)
    return service

@admin_router.get("/financial-summary", response_model=FinancialSummary)
async def get_financial_summary(
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    return await earnings.financial_summary(store)

@admin_router.get("/transactions", response_model=List[TransactionOut])
async def get_transactions(
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    return await store.list_transactions()

@admin_router.put("/transactions/{transaction_id}/status", response_model=TransactionOut)
async def update_transaction_status(
    transaction_id: str,
    status_update: TransactionStatusUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store)
):
    return await earnings.update_transaction_status(store, transaction_id, status_update.status.value)
