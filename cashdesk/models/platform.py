# cashdesk/models/platform.py
# type: ignore

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from uuid import uuid4
from cashdesk.database import Base

SLUG_MAX_LENGTH = 80


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ***************************************************************
# 1. Organization (Tenant / límite de aislamiento)
# ***************************************************************
class Organization(Base):
    """
    Representa una Organización cliente de la plataforma.
    Todo lo demás (sucursales, usuarios, movimientos) cuelga de aquí.
    """
    __tablename__ = "organization"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(120), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), unique=True, nullable=False)  # Identificador URL-friendly
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relaciones
    users = relationship("User", back_populates="organization")
    branches = relationship("Branch", back_populates="organization")


# ***************************************************************
# 2. Branch (Sucursal con su propia caja)
# ***************************************************************
class Branch(Base):
    """
    Representa una sucursal perteneciente a una Organización.
    """
    __tablename__ = "branch"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    code = Column(String(40), nullable=True)

    # NUMERIC(12,2) para precisión financiera
    cash_limit = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relaciones
    organization = relationship("Organization", back_populates="branches")
    users = relationship("User", back_populates="branch")

    # El nombre de la sucursal es único dentro de la organización
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_branch_name_organization"),
    )
