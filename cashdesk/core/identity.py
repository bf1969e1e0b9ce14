# cashdesk/core/identity.py
# type: ignore

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from cashdesk.database import get_db
from cashdesk.core.errors import ErrorCodes, unauthorized
from cashdesk.core.security import decode_token, reusable_oauth2
from cashdesk.core.tenant import TenantUserContext
from cashdesk.models.auth import User
from cashdesk.schemas.auth import TokenPayload

logger = logging.getLogger(__name__)


def as_uuid(value: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as e:
        raise unauthorized(ErrorCodes.AUTH_INVALID_TOKEN, "Token con identificadores inválidos.") from e


def resolve_identity(payload: TokenPayload, db: Session) -> TenantUserContext:
    """
    Convierte el payload verificado del JWT en el contexto de tenant.

    - Si el token trae organization_id se confía en él (sin ir a la DB).
    - Tokens legados (sin claims de organización): se busca el usuario y
      se completan organization_id/branch_id desde la DB.
    """
    user_id = as_uuid(payload.sub)

    if payload.organization_id:
        return TenantUserContext(
            sub=user_id,
            sid=payload.sid,
            organization_id=as_uuid(payload.organization_id),
            branch_id=as_uuid(payload.branch_id) if payload.branch_id else None,
        )

    # Compatibilidad con tokens emitidos antes de los claims de organización
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        logger.warning("Token legado rechazado: usuario %s inexistente o inactivo", user_id)
        raise unauthorized(ErrorCodes.AUTH_USER_INACTIVE, "Usuario no encontrado o inactivo.")

    return TenantUserContext(
        sub=user_id,
        sid=payload.sid,
        organization_id=user.organization_id,
        branch_id=user.branch_id,
    )


# ***************************************************************
# Dependencia para obtener la identidad autenticada
# ***************************************************************
def get_current_identity(
    db: Session = Depends(get_db), token: str = Depends(reusable_oauth2)
) -> TenantUserContext:
    """Decodifica el ACCESS TOKEN y resuelve la identidad del tenant."""
    token_data = decode_token(token)
    return resolve_identity(token_data, db)
