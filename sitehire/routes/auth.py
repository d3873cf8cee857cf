# sitehire/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from datetime import timedelta
from typing import Annotated

from ..models.auth import CustomerCreate, Token, UserOut, UserRole
from ..utils.auth import (
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
    public_profile,
    ACCESS_TOKEN_EXPIRE_MINUTES
)
from ..database import get_store
from ..errors import AuthError, ForbiddenError
from ..store import Store

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])

@auth_router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    store: Store = Depends(get_store)
):
    user = await authenticate_user(form_data.username, form_data.password, store)
    if not user:
        raise AuthError("Incorrect username or password")
    if user["status"] == "suspended":
        raise ForbiddenError("Account is suspended")

    access_token = create_access_token(
        data={"sub": str(user["id"]), "role": user["role"]},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user["role"]
    }

@auth_router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_customer(
    payload: CustomerCreate,
    store: Store = Depends(get_store)
):
    existing = await store.get_user_by_email(payload.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = await store.create_user({
        "email": payload.email,
        "full_name": payload.full_name,
        "phone": payload.phone,
        "role": UserRole.CUSTOMER.value,
        "status": "active",
        "password_hash": get_password_hash(payload.password)
    })
    return public_profile(user)

@auth_router.get("/me", response_model=UserOut)
async def read_current_user(current_user: dict = Depends(get_current_user)):
    return current_user
