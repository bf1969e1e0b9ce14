# cashdesk/core/security.py
# type: ignore
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
from uuid import uuid4
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from cashdesk.core import config
from cashdesk.core.errors import ErrorCodes, unauthorized
from cashdesk.schemas.auth import TokenPayload

# ***************************************************************
# 1. Configuración de Seguridad
# ***************************************************************

# Contexto para hashing de contraseñas (pbkdf2_sha256, sal aleatoria por hash)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Esquema de autenticación para FastAPI (para endpoints protegidos)
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login"  # Endpoint donde se obtiene el token
)

# ***************************************************************
# 2. Funciones de Hashing de Contraseñas
# ***************************************************************

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica si una contraseña en texto plano coincide con el hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Genera el hash de una contraseña en texto plano."""
    return pwd_context.hash(password)

# ***************************************************************
# 3. Funciones de Creación y Verificación de JWT
# ***************************************************************

def new_session_id() -> str:
    return str(uuid4())


def _create_token(
    subject: Union[str, Any],
    token_type: str,
    expires_delta: timedelta,
    session_id: Optional[str] = None,
    organization_id: Optional[Union[str, Any]] = None,
    branch_id: Optional[Union[str, Any]] = None,
) -> str:
    expire = datetime.now(timezone.utc) + expires_delta

    # Datos que se incluirán en el token (payload)
    to_encode = {"exp": expire, "sub": str(subject), "type": token_type}
    if session_id:
        to_encode["sid"] = session_id
    # Claims de tenant: sin ellos el token se trata como legado
    if organization_id:
        to_encode["organization_id"] = str(organization_id)
    if branch_id:
        to_encode["branch_id"] = str(branch_id)

    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    session_id: Optional[str] = None,
    organization_id: Optional[Union[str, Any]] = None,
    branch_id: Optional[Union[str, Any]] = None,
) -> str:
    """Crea un nuevo token de acceso JWT."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(
        subject, ACCESS_TOKEN_TYPE, expires_delta, session_id, organization_id, branch_id
    )


def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    session_id: Optional[str] = None,
    organization_id: Optional[Union[str, Any]] = None,
    branch_id: Optional[Union[str, Any]] = None,
) -> str:
    """Crea un nuevo token de refresco JWT."""
    if expires_delta is None:
        expires_delta = timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(
        subject, REFRESH_TOKEN_TYPE, expires_delta, session_id, organization_id, branch_id
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> TokenPayload:
    """Decodifica y valida un token JWT. Lanza 401 si falla."""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError, TypeError) as e:
        raise unauthorized(
            ErrorCodes.AUTH_INVALID_TOKEN, "Credenciales inválidas o token expirado."
        ) from e

    if token_data.sub is None:
        raise unauthorized(ErrorCodes.AUTH_INVALID_TOKEN, "Token no contiene ID de usuario.")

    # Los tokens legados no traen 'type' y solo se aceptan como access token
    token_type = token_data.type or ACCESS_TOKEN_TYPE
    if token_type != expected_type:
        raise unauthorized(ErrorCodes.AUTH_INVALID_TOKEN, "Tipo de token inválido.")

    return token_data
