# cashdesk/api/v1/endpoints/cash_movements.py
# type: ignore

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from cashdesk.database import get_db
from cashdesk.models.cashflow import CashMovementStatus
from cashdesk.schemas.cashflow import CashMovementCreate, CashMovementFilters, CashMovementInDB
from cashdesk.core.tenant import TenantUserContext
from cashdesk.api import policies
from cashdesk.services.cash_movements import CashMovementService


router = APIRouter()


# ***************************************************************
# 1. Alta (POST /cash-movements) -> siempre PENDING
# ***************************************************************
@router.post("/", response_model=CashMovementInDB, status_code=status.HTTP_201_CREATED, tags=["Cash Movements"])
def create_cash_movement(
    movement_in: CashMovementCreate,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.create_cash_movement),
):
    """
    Registra un movimiento de caja.
    Un OPERATOR siempre registra en su propia sucursal.
    """
    return CashMovementService(db).create(identity, movement_in)


# ***************************************************************
# 2. Listado (GET /cash-movements)
# ***************************************************************
@router.get("/", response_model=List[CashMovementInDB], tags=["Cash Movements"])
def read_cash_movements(
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_cash_movements),
    branch_id: Optional[UUID] = Query(None, alias="branchId", description="Filtrar por sucursal"),
    movement_status: Optional[CashMovementStatus] = Query(None, alias="status", description="Filtrar por estado"),
    date_from: Optional[datetime] = Query(None, alias="from", description="Creado desde (inclusive)"),
    date_to: Optional[datetime] = Query(None, alias="to", description="Creado hasta (inclusive)"),
):
    """Lista movimientos de la organización, los más nuevos primero."""
    filters = CashMovementFilters(
        branch_id=branch_id, status=movement_status, date_from=date_from, date_to=date_to
    )
    return CashMovementService(db).find_all(identity, filters)


# ***************************************************************
# 3. Transiciones de estado (PATCH /cash-movements/{id}/...)
# ***************************************************************
@router.patch("/{movement_id}/approve", response_model=CashMovementInDB, tags=["Cash Movements"])
def approve_cash_movement(
    movement_id: UUID,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.approve_cash_movement),
):
    """Aprueba un movimiento PENDING."""
    return CashMovementService(db).approve(identity, movement_id)


@router.patch("/{movement_id}/reject", response_model=CashMovementInDB, tags=["Cash Movements"])
def reject_cash_movement(
    movement_id: UUID,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.approve_cash_movement),
):
    """Rechaza un movimiento PENDING (estado terminal)."""
    return CashMovementService(db).reject(identity, movement_id)


@router.patch("/{movement_id}/deliver", response_model=CashMovementInDB, tags=["Cash Movements"])
def deliver_cash_movement(
    movement_id: UUID,
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.deliver_cash_movement),
):
    """Marca como entregado un movimiento APPROVED."""
    return CashMovementService(db).deliver(identity, movement_id)
