# cashdesk/core/tenant.py
"""
Aislamiento por organización (tenant).

Toda consulta a la base debe pasar por ``with_organization_scope`` o
``scoped_query``. ``assert_same_organization`` se usa cuando un recurso se
carga por ID sin el filtro de organización.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Query, Session

from cashdesk.core.errors import forbidden

logger = logging.getLogger(__name__)

ORGANIZATION_KEY = "organization_id"


@dataclass(frozen=True)
class TenantUserContext:
    """Identidad verificada del usuario que hace el request."""
    sub: UUID
    organization_id: UUID
    branch_id: Optional[UUID] = None
    sid: Optional[str] = None


def with_organization_scope(organization_id: UUID, where: Optional[dict] = None) -> dict:
    """Devuelve un filtro nuevo = ``where`` + la organización."""
    where = dict(where or {})
    if ORGANIZATION_KEY in where:
        raise ValueError("El filtro base no debe incluir organization_id; lo agrega el scope.")
    where[ORGANIZATION_KEY] = organization_id
    return where


def scoped_query(db: Session, model: Any, organization_id: UUID, **where: Any) -> Query:
    """``db.query(model)`` restringido a la organización indicada."""
    return db.query(model).filter_by(**with_organization_scope(organization_id, where))


def assert_same_organization(resource_organization_id: UUID, requester_organization_id: UUID) -> None:
    if resource_organization_id != requester_organization_id:
        logger.warning(
            "Acceso cruzado entre organizaciones bloqueado (recurso=%s, solicitante=%s)",
            resource_organization_id,
            requester_organization_id,
        )
        raise forbidden("Acceso denegado entre organizaciones.")


def require_user_branch_id(user: TenantUserContext) -> UUID:
    if not user.branch_id:
        raise forbidden("El usuario no tiene una sucursal asignada.")
    return user.branch_id
