# cashdesk/core/authorization.py
# type: ignore

import logging
from typing import Iterable, List, Set
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from cashdesk.database import get_db
from cashdesk.core.errors import ErrorCodes, forbidden
from cashdesk.core.identity import get_current_identity
from cashdesk.core.tenant import TenantUserContext
from cashdesk.models.auth import Permission, Role, RolePermission, UserRole

logger = logging.getLogger(__name__)

# Catálogo fijo de roles
ADMIN = "ADMIN"
USER = "USER"
MANAGER = "MANAGER"
OPERATOR = "OPERATOR"


# ***************************************************************
# 1. Resolución de roles y permisos (UserRole -> Role -> RolePermission)
# ***************************************************************
def get_user_roles(db: Session, user_id: UUID) -> List[str]:
    """Nombres de los roles asignados al usuario."""
    rows = (
        db.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .all()
    )
    return [name for (name,) in rows]


def get_user_permissions(db: Session, user_id: UUID) -> Set[str]:
    """Claves de permiso que el usuario obtiene a través de cualquiera de sus roles."""
    rows = (
        db.query(Permission.key)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .filter(UserRole.user_id == user_id)
        .distinct()
        .all()
    )
    return {key for (key,) in rows}


def has_role(db: Session, user_id: UUID, role_name: str) -> bool:
    return role_name in get_user_roles(db, user_id)


# ***************************************************************
# 2. Política de acceso por ruta
# ***************************************************************
class AccessPolicy:
    """
    Política de autorización adjunta a una ruta vía ``Depends``.

    Orden fijo: autenticación -> chequeo de rol (al menos uno de ``roles``)
    -> chequeo de permisos (todas las claves de ``permissions``). Una
    política sin roles ni permisos solo exige autenticación.
    """

    def __init__(self, name: str, roles: Iterable[str] = (), permissions: Iterable[str] = ()):
        self.name = name
        self.roles = tuple(roles)
        self.permissions = tuple(permissions)

    def __repr__(self) -> str:
        return f"AccessPolicy({self.name!r}, roles={self.roles}, permissions={self.permissions})"

    def check_roles(self, db: Session, identity: TenantUserContext) -> None:
        if not self.roles:
            return
        roles = get_user_roles(db, identity.sub)
        if not any(role in roles for role in self.roles):
            logger.warning(
                "Política %s: usuario %s sin rol requerido %s", self.name, identity.sub, self.roles
            )
            raise forbidden(
                f"Se requiere uno de los roles: {', '.join(self.roles)}.",
                code=ErrorCodes.ROLE_REQUIRED,
            )

    def check_permissions(self, db: Session, identity: TenantUserContext) -> None:
        if not self.permissions:
            return
        granted = get_user_permissions(db, identity.sub)
        missing = [key for key in self.permissions if key not in granted]
        if missing:
            logger.warning(
                "Política %s: usuario %s sin permisos %s", self.name, identity.sub, missing
            )
            raise forbidden(
                f"Permiso requerido: {', '.join(missing)}.",
                code=ErrorCodes.PERMISSION_REQUIRED,
            )

    def __call__(
        self,
        identity: TenantUserContext = Depends(get_current_identity),
        db: Session = Depends(get_db),
    ) -> TenantUserContext:
        self.check_roles(db, identity)
        self.check_permissions(db, identity)
        return identity
