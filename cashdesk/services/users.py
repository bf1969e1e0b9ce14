# cashdesk/services/users.py
# type: ignore

import logging
from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cashdesk.core.authorization import ADMIN, get_user_permissions, has_role
from cashdesk.core.errors import ErrorCodes, api_error, conflict, forbidden, not_found
from cashdesk.core.security import get_password_hash
from cashdesk.core.tenant import TenantUserContext, scoped_query
from cashdesk.models.auth import Role, User, UserRole
from cashdesk.schemas.auth import CurrentUser, UserCreate, UserInDB, UserUpdate
from cashdesk.services.branches import BranchService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    # ***************************************************************
    # Lectura
    # ***************************************************************
    def find_all(self, identity: TenantUserContext) -> List[UserInDB]:
        """Usuarios activos de la organización del solicitante."""
        users = (
            scoped_query(self.db, User, identity.organization_id, is_active=True)
            .order_by(User.created_at.desc())
            .all()
        )
        return [self.to_view(user) for user in users]

    def find_by_id(self, user_id: UUID, identity: TenantUserContext) -> UserInDB:
        user = self._get_accessible(user_id, identity)
        return self.to_view(user)

    def me(self, identity: TenantUserContext) -> CurrentUser:
        user = scoped_query(self.db, User, identity.organization_id, id=identity.sub).first()
        if user is None:
            raise not_found(ErrorCodes.USER_NOT_FOUND, "Usuario no encontrado.")
        view = self.to_view(user)
        permissions = sorted(get_user_permissions(self.db, user.id))
        return CurrentUser(**view.model_dump(), permissions=permissions)

    # ***************************************************************
    # Escritura
    # ***************************************************************
    def create(self, user_in: UserCreate, identity: TenantUserContext) -> UserInDB:
        # 1. Unicidad global del email
        if self.db.query(User).filter(User.email == user_in.email).first():
            raise conflict(ErrorCodes.USER_ALREADY_EXISTS, "El usuario ya existe.")

        # 2. Roles válidos (al menos uno)
        roles = self._resolve_roles(user_in.roles)

        # 3. La sucursal, si viene, debe ser de la organización del creador
        if user_in.branch_id:
            BranchService(self.db).assert_exists(user_in.branch_id, identity.organization_id)

        db_user = User(
            email=user_in.email,
            password_hash=get_password_hash(user_in.password),
            is_active=True,
            organization_id=identity.organization_id,
            branch_id=user_in.branch_id,
        )
        db_user.roles = [UserRole(role=role) for role in roles]

        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise conflict(ErrorCodes.USER_ALREADY_EXISTS, "El usuario ya existe.") from e
        self.db.refresh(db_user)

        logger.info("Usuario %s creado en organización %s", db_user.id, identity.organization_id)
        return self.to_view(db_user)

    def update(self, user_id: UUID, user_in: UserUpdate, identity: TenantUserContext) -> UserInDB:
        db_user = self._get_accessible(user_id, identity)
        update_data = user_in.model_dump(exclude_unset=True)

        # Roles, estado y sucursal solo los cambia un ADMIN (evita auto-escalada)
        sensitive = {"roles", "is_active", "branch_id"} & update_data.keys()
        if sensitive and not has_role(self.db, identity.sub, ADMIN):
            raise forbidden("Solo un ADMIN puede cambiar roles, estado o sucursal de un usuario.")

        roles = update_data.pop("roles", None)
        if roles is not None:
            new_roles = self._resolve_roles(roles)
            # Se borran las membresías viejas antes de insertar (unique user_id, role_id)
            db_user.roles = []
            self.db.flush()
            db_user.roles = [UserRole(role=role) for role in new_roles]

        if "password" in update_data:
            db_user.password_hash = get_password_hash(update_data.pop("password"))

        if update_data.get("branch_id") is not None:
            BranchService(self.db).assert_exists(update_data["branch_id"], identity.organization_id)

        for key, value in update_data.items():
            setattr(db_user, key, value)

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)
        return self.to_view(db_user)

    def remove(self, user_id: UUID, identity: TenantUserContext) -> None:
        """Baja lógica: el usuario queda inactivo."""
        db_user = self._get_accessible(user_id, identity)
        db_user.is_active = False
        self.db.add(db_user)
        self.db.commit()
        logger.info("Usuario %s desactivado por %s", user_id, identity.sub)

    # ***************************************************************
    # Auxiliares
    # ***************************************************************
    def _get_accessible(self, user_id: UUID, identity: TenantUserContext) -> User:
        """
        Busca el usuario dentro de la organización (404 si no) y verifica que
        el solicitante sea ADMIN o el propio usuario (403 si no).
        """
        user = scoped_query(self.db, User, identity.organization_id, id=user_id).first()
        if user is None:
            raise not_found(ErrorCodes.USER_NOT_FOUND, "Usuario no encontrado.")

        if user.id != identity.sub and not has_role(self.db, identity.sub, ADMIN):
            raise forbidden("Acceso denegado. No tienes permisos para acceder a otros usuarios.")
        return user

    def _resolve_roles(self, names: List[str]) -> List[Role]:
        names = list(dict.fromkeys(names))
        if not names:
            raise api_error(
                status.HTTP_400_BAD_REQUEST, ErrorCodes.USER_ROLE_REQUIRED, "Se requiere al menos un rol."
            )
        roles = self.db.query(Role).filter(Role.name.in_(names)).all()
        if len(roles) != len(names):
            raise api_error(
                status.HTTP_400_BAD_REQUEST, ErrorCodes.USER_INVALID_ROLE, "Uno o más roles no son válidos."
            )
        return roles

    @staticmethod
    def to_view(user: User) -> UserInDB:
        return UserInDB(
            id=user.id,
            email=user.email,
            is_active=user.is_active,
            organization_id=user.organization_id,
            branch_id=user.branch_id,
            roles=user.role_names,
            created_at=user.created_at,
        )
