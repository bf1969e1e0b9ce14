# cashdesk/api/v1/endpoints/users.py
# type: ignore

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from cashdesk.database import get_db
from cashdesk.schemas.auth import UserCreate, UserInDB, UserUpdate
from cashdesk.core.tenant import TenantUserContext
from cashdesk.api import policies
from cashdesk.services.users import UserService


router = APIRouter()


# ***************************************************************
# 1. Listar usuarios activos de la organización (GET /users/)
# ***************************************************************
@router.get("/", response_model=List[UserInDB], tags=["Users"])
def read_users(
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_users),
):
    return UserService(db).find_all(identity)


# ***************************************************************
# 2. Crear usuario (POST /users/)
# ***************************************************************
@router.post("/", response_model=UserInDB, status_code=status.HTTP_201_CREATED, tags=["Users"])
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.write_users),
):
    """
    Crea un usuario en la organización del creador.
    Requiere al menos un rol válido; la sucursal debe ser de la organización.
    """
    return UserService(db).create(user_in, identity)


# ***************************************************************
# 3. Buscar usuario por ID (GET /users/{user_id})
# ***************************************************************
@router.get("/{user_id}", response_model=UserInDB, tags=["Users"])
def read_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_users),
):
    """ADMIN o el propio usuario."""
    return UserService(db).find_by_id(user_id, identity)


# ***************************************************************
# 4. Actualizar usuario (PATCH /users/{user_id})
# ***************************************************************
@router.patch("/{user_id}", response_model=UserInDB, tags=["Users"])
def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.write_users),
):
    return UserService(db).update(user_id, user_in, identity)


# ***************************************************************
# 5. Baja lógica (DELETE /users/{user_id})
# ***************************************************************
@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Users"])
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.write_users),
):
    """Desactiva el usuario (is_active = False); el registro no se borra."""
    UserService(db).remove(user_id, identity)
