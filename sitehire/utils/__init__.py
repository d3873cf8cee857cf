# sitehire/utils/__init__.py
from .auth import (
    oauth2_scheme,
    verify_password,
    get_password_hash,
    create_access_token,
    public_profile,
    authenticate_user,
    get_current_user
)

__all__ = [
    "oauth2_scheme",
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "public_profile",
    "authenticate_user",
    "get_current_user",
]
