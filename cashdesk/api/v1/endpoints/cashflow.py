# cashdesk/api/v1/endpoints/cashflow.py
# type: ignore

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import datetime

from cashdesk.database import get_db
from cashdesk.schemas.cashflow import CashflowStats, MovementFilters
from cashdesk.core.tenant import TenantUserContext
from cashdesk.api import policies
from cashdesk.services.cashflow_stats import CashflowStatsService

router = APIRouter()


@router.get("/stats", response_model=CashflowStats, tags=["Cashflow"])
def read_cashflow_stats(
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_cashflow_stats),
    branch_id: Optional[UUID] = Query(None, alias="branchId", description="Filtrar por sucursal"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
):
    """Totales aprobados de ingresos/egresos, balance y cantidad de pendientes."""
    filters = MovementFilters(branch_id=branch_id, date_from=date_from, date_to=date_to)
    return CashflowStatsService(db).get_stats(identity, filters)
