# cashdesk/schemas/cashflow.py
# type: ignore
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime

from cashdesk.models.cashflow import CashMovementStatus, CashMovementType
from cashdesk.schemas.common import CamelModel


# ***************************************************************
# 1. Movimientos de caja
# ***************************************************************
class CashMovementCreate(CamelModel):
    """Schema de entrada para registrar un movimiento (siempre nace PENDING)."""
    type: CashMovementType
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    branch_id: Optional[UUID] = None


class MovementFilters(BaseModel):
    """Filtros comunes a listado y estadísticas."""
    branch_id: Optional[UUID] = None
    date_from: Optional[datetime] = Field(None, alias="from")
    date_to: Optional[datetime] = Field(None, alias="to")

    model_config = {"populate_by_name": True}


class CashMovementFilters(MovementFilters):
    """Filtros del listado de movimientos."""
    status: Optional[CashMovementStatus] = None


class CashMovementInDB(CamelModel):
    """Schema de salida de un movimiento. amount viaja como string decimal, claves en camelCase."""
    id: UUID
    organization_id: UUID
    branch_id: UUID
    type: CashMovementType
    amount: str
    description: Optional[str] = None
    status: CashMovementStatus
    created_by_id: UUID
    approved_by_id: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


# ***************************************************************
# 2. Estadísticas
# ***************************************************************
class CashflowStats(CamelModel):
    """Agregados del flujo de caja. Los montos son strings decimales exactos."""
    total_income_approved: str
    total_expense_approved: str
    balance: str
    pending_count: int
