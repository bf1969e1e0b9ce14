# cashdesk/api/v1/endpoints/roles.py
# type: ignore

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from cashdesk.database import get_db
from cashdesk.schemas.auth import RoleList, RoleInDB
from cashdesk.models.auth import Role
from cashdesk.core.tenant import TenantUserContext
from cashdesk.api import policies

router = APIRouter()


# ***************************************************************
# 1. Endpoint para listar el catálogo de Roles (ACCESO AUTENTICADO)
# ***************************************************************
@router.get("/", response_model=RoleList, tags=["Roles"])
def get_all_roles(
    _: TenantUserContext = Depends(policies.authenticated),
    db: Session = Depends(get_db),
):
    """Lista el catálogo fijo de roles. Requiere autenticación."""
    roles_from_db = db.query(Role).order_by(Role.name).all()
    return {"roles": [RoleInDB.model_validate(r) for r in roles_from_db]}
