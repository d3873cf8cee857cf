# sitehire/utils/auth.py
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from typing import Optional

from ..database import get_store
from ..config import settings
from ..errors import AuthError, ForbiddenError
from ..store import Store

# Constants
SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def public_profile(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password_hash"}

async def authenticate_user(email: str, password: str, store: Store) -> Optional[dict]:
    user = await store.get_user_by_email(email)
    if user and verify_password(password, user["password_hash"]):
        return public_profile(user)
    return None

async def get_current_user(token: str = Depends(oauth2_scheme), store: Store = Depends(get_store)) -> dict:
    """Get the current authenticated user from JWT token"""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
        user_id: str = payload.get("sub")
        if user_id is None:
            raise AuthError()
    except JWTError:
        raise AuthError()

    user = await store.get_user(user_id)
    if user is None:
        raise AuthError()
    if user["status"] == "suspended":
        raise ForbiddenError("Account is suspended")

    return public_profile(user)

__all__ = [
    "oauth2_scheme",
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "public_profile",
    "authenticate_user",
    "get_current_user",
    "ACCESS_TOKEN_EXPIRE_MINUTES"
]
