# models/__init__.py
"""
Importações dos modelos em ordem correta para evitar problemas de relacionamento.

ORDEM IMPORTANTE:
1. Base (do db.py)
2. Empresa
3. Modelos que dependem da empresa
"""

# Importa Base do db.py
from db import Base

# 1. Empresa
from .company import Company

# 2. Modelos com FK para empresa
from .fiscal_data import FiscalData
from .company_password import CompanyPassword

# Lista todos os modelos exportados
__all__ = [
    "Base",
    "Company",
    "FiscalData",
    "CompanyPassword",
]
