# cashdesk/seed.py
# type: ignore
"""
Bootstrap del catálogo RBAC: roles, permisos y asignaciones por defecto.

Es idempotente; se puede ejecutar en cada arranque:

    python -m cashdesk.seed
"""

import logging

from sqlalchemy.orm import Session

from cashdesk.core import config
from cashdesk.models.auth import Permission, Role, RolePermission, User, UserRole

logger = logging.getLogger(__name__)

# ***************************************************************
# 1. Catálogo de permisos
# ***************************************************************
USERS_READ = "users.read"
USERS_WRITE = "users.write"
BRANCHES_READ = "branches.read"
BRANCHES_WRITE = "branches.write"
CASH_MOVEMENTS_CREATE = "cashMovements.create"
CASH_MOVEMENTS_READ = "cashMovements.read"
CASH_MOVEMENTS_APPROVE = "cashMovements.approve"
CASH_MOVEMENTS_DELIVER = "cashMovements.deliver"
CASHFLOW_STATS_READ = "cashflow.stats.read"

PERMISSIONS = {
    USERS_READ: "Read users",
    USERS_WRITE: "Write users",
    BRANCHES_READ: "Read branches",
    BRANCHES_WRITE: "Write branches",
    CASH_MOVEMENTS_CREATE: "Create cash movements",
    CASH_MOVEMENTS_READ: "Read cash movements",
    CASH_MOVEMENTS_APPROVE: "Approve or reject cash movements",
    CASH_MOVEMENTS_DELIVER: "Mark cash movements as delivered",
    CASHFLOW_STATS_READ: "Read cashflow stats",
}

# ***************************************************************
# 2. Catálogo de roles y asignaciones por defecto
# ***************************************************************
ROLES = {
    "ADMIN": "Administrator",
    "USER": "Regular user",
    "MANAGER": "Organization manager",
    "OPERATOR": "Branch operator",
}

DEFAULT_GRANTS = {
    "ADMIN": list(PERMISSIONS),
    "MANAGER": [
        BRANCHES_READ,
        CASH_MOVEMENTS_READ,
        CASH_MOVEMENTS_APPROVE,
        CASH_MOVEMENTS_DELIVER,
        CASHFLOW_STATS_READ,
    ],
    "OPERATOR": [
        CASH_MOVEMENTS_CREATE,
        CASH_MOVEMENTS_READ,
        CASHFLOW_STATS_READ,
    ],
    # Mínimo privilegio: USER no recibe permisos
    "USER": [],
}


def _get_or_create_role(db: Session, name: str, description: str) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, description=description)
        db.add(role)
        db.flush()
    return role


def _get_or_create_permission(db: Session, key: str, description: str) -> Permission:
    permission = db.query(Permission).filter(Permission.key == key).first()
    if permission is None:
        permission = Permission(key=key, description=description)
        db.add(permission)
        db.flush()
    return permission


def seed_rbac(db: Session) -> None:
    """Crea (si faltan) roles, permisos y las asignaciones por defecto."""
    roles = {name: _get_or_create_role(db, name, description) for name, description in ROLES.items()}
    permissions = {
        key: _get_or_create_permission(db, key, description) for key, description in PERMISSIONS.items()
    }

    for role_name, keys in DEFAULT_GRANTS.items():
        role = roles[role_name]
        granted = {
            permission_id
            for (permission_id,) in db.query(RolePermission.permission_id).filter(RolePermission.role_id == role.id)
        }
        for key in keys:
            if permissions[key].id not in granted:
                db.add(RolePermission(role_id=role.id, permission_id=permissions[key].id))

    # USER se mantiene sin permisos aunque alguien le haya asignado alguno
    db.query(RolePermission).filter(RolePermission.role_id == roles["USER"].id).delete(
        synchronize_session=False
    )

    db.commit()
    logger.info("Catálogo RBAC sincronizado: %d roles, %d permisos", len(roles), len(permissions))


def assign_admin(db: Session, email: str) -> bool:
    """Asigna el rol ADMIN al usuario existente con ese email. Devuelve False si no existe."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        logger.warning("SEED_ADMIN_EMAIL=%s no existe. Se omite la asignación de ADMIN.", email)
        return False

    admin_role = db.query(Role).filter(Role.name == "ADMIN").one()
    exists = (
        db.query(UserRole)
        .filter(UserRole.user_id == user.id, UserRole.role_id == admin_role.id)
        .first()
    )
    if exists is None:
        db.add(UserRole(user_id=user.id, role_id=admin_role.id))
        db.commit()
    logger.info("Rol ADMIN asignado a %s", email)
    return True


def main() -> None:
    from cashdesk.database import Base, SessionLocal, engine
    import cashdesk.models.platform  # noqa: F401
    import cashdesk.models.cashflow  # noqa: F401

    logging.basicConfig(level=config.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_rbac(db)
        if config.SEED_ADMIN_EMAIL:
            assign_admin(db, config.SEED_ADMIN_EMAIL)
        else:
            logger.info("SEED_ADMIN_EMAIL no definido, se omite la asignación automática de ADMIN.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
