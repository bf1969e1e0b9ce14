# cashdesk/models/cashflow.py
# type: ignore

import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Numeric, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
from cashdesk.database import Base
from cashdesk.models.platform import utcnow


class CashMovementType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class CashMovementStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DELIVERED = "DELIVERED"


# Transiciones válidas: estado destino -> estado origen requerido.
# PENDING -> APPROVED -> DELIVERED y PENDING -> REJECTED (terminal).
REQUIRED_SOURCE_STATUS = {
    CashMovementStatus.APPROVED: CashMovementStatus.PENDING,
    CashMovementStatus.REJECTED: CashMovementStatus.PENDING,
    CashMovementStatus.DELIVERED: CashMovementStatus.APPROVED,
}


class CashMovement(Base):
    """Ingreso o egreso de caja de una sucursal, sujeto al flujo de aprobación."""
    __tablename__ = "cash_movement"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Uuid(as_uuid=True), ForeignKey("branch.id"), nullable=False, index=True)

    type = Column(Enum(CashMovementType, name="cash_movement_type"), nullable=False)
    # NUMERIC(12,2): siempre positivo, máximo dos decimales
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(
        Enum(CashMovementStatus, name="cash_movement_status"),
        default=CashMovementStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=False)
    # Quien sacó el movimiento de PENDING (aprobación o rechazo)
    approved_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    branch = relationship("Branch")
    created_by = relationship("User", foreign_keys=[created_by_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])
