"""
Fixtures compartidas de pytest.

La API corre contra una base SQLite en memoria (una sola conexión compartida
vía StaticPool) con el catálogo RBAC ya cargado. Las factories crean
organizaciones, sucursales, usuarios y movimientos directamente con el ORM.
"""

import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator

# El entorno debe estar listo antes de importar la aplicación
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cashdesk.core.security import create_access_token, get_password_hash
from cashdesk.core.tenant import TenantUserContext
from cashdesk.database import Base, get_db
from cashdesk.main import app
from cashdesk.models.auth import Role, User, UserRole
from cashdesk.models.cashflow import CashMovement, CashMovementStatus, CashMovementType
from cashdesk.models.platform import Branch, Organization
from cashdesk.seed import seed_rbac

TEST_PASSWORD = "secret123"


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Sesión usada por tests y factories; el catálogo RBAC ya está cargado."""
    session = session_factory()
    seed_rbac(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, db_session) -> Generator[TestClient, None, None]:
    """TestClient cuyos requests abren su propia sesión sobre la base de test."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================


@pytest.fixture
def make_org(db_session):
    counter = {"n": 0}

    def _make(name: str = None) -> Organization:
        counter["n"] += 1
        name = name or f"Org {counter['n']}"
        org = Organization(name=name, slug=f"org-{counter['n']}-{os.urandom(3).hex()}")
        db_session.add(org)
        db_session.commit()
        return org

    return _make


@pytest.fixture
def make_branch(db_session):
    def _make(org: Organization, name: str = "Main", cash_limit=None, created_at: datetime = None) -> Branch:
        branch = Branch(organization_id=org.id, name=name, cash_limit=cash_limit)
        if created_at is not None:
            branch.created_at = created_at
        db_session.add(branch)
        db_session.commit()
        return branch

    return _make


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(
        org: Organization,
        roles=(),
        branch: Branch = None,
        email: str = None,
        is_active: bool = True,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            organization_id=org.id,
            branch_id=branch.id if branch else None,
            is_active=is_active,
        )
        for role_name in roles:
            role = db_session.query(Role).filter(Role.name == role_name).one()
            user.roles.append(UserRole(role=role))
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_movement(db_session):
    def _make(
        org: Organization,
        branch: Branch,
        creator: User,
        movement_type: CashMovementType = CashMovementType.INCOME,
        amount: str = "100.00",
        status: CashMovementStatus = CashMovementStatus.PENDING,
        approved_by: User = None,
        created_at: datetime = None,
    ) -> CashMovement:
        movement = CashMovement(
            organization_id=org.id,
            branch_id=branch.id,
            type=movement_type,
            amount=Decimal(amount),
            status=status,
            created_by_id=creator.id,
            approved_by_id=approved_by.id if approved_by else None,
            approved_at=datetime.now(timezone.utc) if approved_by else None,
        )
        if created_at is not None:
            movement.created_at = created_at
        db_session.add(movement)
        db_session.commit()
        return movement

    return _make


# ============================================================================
# AUXILIARES DE AUTENTICACIÓN
# ============================================================================


def identity_for(user: User) -> TenantUserContext:
    return TenantUserContext(
        sub=user.id,
        organization_id=user.organization_id,
        branch_id=user.branch_id,
    )


def bearer(user: User, legacy: bool = False) -> dict:
    """Header Authorization con un access token para ``user``.

    ``legacy=True`` emite un token sin claims de organización.
    """
    if legacy:
        token = create_access_token(subject=str(user.id))
    else:
        token = create_access_token(
            subject=str(user.id),
            session_id="test-session",
            organization_id=user.organization_id,
            branch_id=user.branch_id,
        )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tenant(make_org, make_branch, make_user):
    """Una organización con dos sucursales y un usuario por rol."""
    org = make_org("Acme")
    main = make_branch(org, "Main")
    north = make_branch(org, "North")

    class Tenant:
        pass

    t = Tenant()
    t.org = org
    t.main = main
    t.north = north
    t.admin = make_user(org, roles=["ADMIN"], branch=main)
    t.manager = make_user(org, roles=["MANAGER"])
    t.operator = make_user(org, roles=["OPERATOR"], branch=main)
    t.north_operator = make_user(org, roles=["OPERATOR"], branch=north)
    t.plain = make_user(org, roles=["USER"])
    return t
