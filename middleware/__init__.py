# middleware/__init__.py
from .auth import (
    CompanyAccess,
    company_access_from_tokens,
    get_company_access,
    garantir_acesso,
)

__all__ = [
    "CompanyAccess",
    "company_access_from_tokens",
    "get_company_access",
    "garantir_acesso",
]
