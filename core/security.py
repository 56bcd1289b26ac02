# core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from .config import settings

# Contexto de hash para senhas (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

COMPANY_ACCESS_TOKEN_TYPE = "company_access"


def hash_password(password: str) -> str:
    """Gera hash da senha usando bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha corresponde ao hash.

    Hashes em formato desconhecido (ex: legado) são tratados como não correspondentes.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def validate_password_strength(password: str) -> tuple[bool, str]:
    """
    Valida a senha de empresa conforme política definida.
    Retorna (válido, mensagem_erro).
    """
    if not password or not password.strip():
        return False, "Senha é obrigatória"

    if len(password) < settings.PASSWORD_MIN_LENGTH:
        return False, f"Senha deve ter pelo menos {settings.PASSWORD_MIN_LENGTH} caracteres"

    return True, ""


def create_company_access_token(
    company_id: int,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Cria token JWT que libera o acesso aos dados de uma empresa protegida.

    Args:
        company_id: ID da empresa liberada
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT codificado
    """
    agora = datetime.now(timezone.utc)
    expire = agora + (
        expires_delta or timedelta(minutes=settings.COMPANY_ACCESS_EXPIRE_MINUTES)
    )

    payload = {
        "sub": str(company_id),
        "exp": expire,
        "iat": agora,
        "type": COMPANY_ACCESS_TOKEN_TYPE,
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_company_access_token(token: str) -> Optional[int]:
    """
    Decodifica e valida um token de acesso a empresa.

    Args:
        token: Token JWT

    Returns:
        ID da empresa liberada ou None se o token for inválido/expirado
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != COMPANY_ACCESS_TOKEN_TYPE:
        return None

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
