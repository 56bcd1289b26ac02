# core/__init__.py
from .config import settings
from .security import (
    hash_password,
    verify_password,
    validate_password_strength,
    create_company_access_token,
    decode_company_access_token,
)

__all__ = [
    "settings",
    "hash_password",
    "verify_password",
    "validate_password_strength",
    "create_company_access_token",
    "decode_company_access_token",
]
