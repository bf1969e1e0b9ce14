# cashdesk/api/v1/endpoints/auth.py
# type: ignore

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from cashdesk.database import get_db
from cashdesk.schemas.auth import UserLogin, Token, CurrentUser
from cashdesk.models.auth import User
from cashdesk.core.errors import ErrorCodes, forbidden, unauthorized
from cashdesk.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    new_session_id,
    reusable_oauth2,
    decode_token,
    REFRESH_TOKEN_TYPE,
)
from cashdesk.core.tenant import TenantUserContext
from cashdesk.core.identity import as_uuid
from cashdesk.api import policies
from cashdesk.services.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_tokens(user: User, session_id: str) -> dict:
    """Genera el par access/refresh con los claims de tenant del usuario."""
    claims = {
        "session_id": session_id,
        "organization_id": user.organization_id,
        "branch_id": user.branch_id,
    }
    return {
        "access_token": create_access_token(subject=str(user.id), **claims),
        "refresh_token": create_refresh_token(subject=str(user.id), **claims),
        "token_type": "bearer",
        "roles": user.role_names,
    }


# ***************************************************************
# 1. Endpoint de Login
# ***************************************************************
@router.post("/login", response_model=Token, tags=["Auth"])
def login_for_access_token(user_in: UserLogin, db: Session = Depends(get_db)):
    """Autentica un usuario y devuelve un token JWT y un Refresh Token."""
    user = db.query(User).filter(User.email == user_in.email).first()

    if not user or not verify_password(user_in.password, user.password_hash):
        raise unauthorized(ErrorCodes.AUTH_INVALID_CREDENTIALS, "Email o contraseña incorrectos.")

    if not user.is_active:
        raise forbidden("La cuenta de usuario está inactiva.", code=ErrorCodes.AUTH_USER_INACTIVE)

    logger.info("Login de usuario %s", user.id)
    return _issue_tokens(user, new_session_id())


# ***************************************************************
# 2. Endpoint de Refresh (Token Rotation)
# ***************************************************************
@router.post("/refresh", response_model=Token, tags=["Auth"])
def refresh_access_token(
    # Se espera el refresh_token en el header 'Authorization: Bearer <token>'
    refresh_token: str = Depends(reusable_oauth2),
    db: Session = Depends(get_db),
):
    """
    Refresca el token de acceso usando un Refresh Token.
    Devuelve un nuevo access_token y un nuevo refresh_token (misma sesión).
    """
    token_data = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)

    user = db.query(User).filter(User.id == as_uuid(token_data.sub)).first()
    if user is None or not user.is_active:
        raise unauthorized(ErrorCodes.AUTH_USER_INACTIVE, "Usuario no encontrado o inactivo.")

    return _issue_tokens(user, token_data.sid or new_session_id())


# ***************************************************************
# 3. Usuario autenticado
# ***************************************************************
@router.get("/me", response_model=CurrentUser, tags=["Auth"])
def read_users_me(
    identity: TenantUserContext = Depends(policies.authenticated),
    db: Session = Depends(get_db),
):
    """Obtiene el usuario autenticado con sus roles y permisos efectivos."""
    return UserService(db).me(identity)
