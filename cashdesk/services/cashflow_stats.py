# cashdesk/services/cashflow_stats.py
# type: ignore

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from cashdesk.core.authorization import OPERATOR, get_user_roles
from cashdesk.core.tenant import TenantUserContext
from cashdesk.models.cashflow import CashMovement, CashMovementStatus, CashMovementType
from cashdesk.schemas.cashflow import CashflowStats, MovementFilters
from cashdesk.services.branches import format_money
from cashdesk.services.cash_movements import movement_scope

# Un movimiento entregado fue aprobado antes: sigue contando como aprobado
APPROVED_STATUSES = (CashMovementStatus.APPROVED, CashMovementStatus.DELIVERED)


class CashflowStatsService:
    def __init__(self, db: Session):
        self.db = db

    def get_stats(self, identity: TenantUserContext, filters: MovementFilters) -> CashflowStats:
        is_operator = OPERATOR in get_user_roles(self.db, identity.sub)
        scope = movement_scope(self.db, identity, filters, is_operator)

        total_income = self._approved_sum(scope, CashMovementType.INCOME)
        total_expense = self._approved_sum(scope, CashMovementType.EXPENSE)
        pending_count = scope.filter(CashMovement.status == CashMovementStatus.PENDING).count()

        return CashflowStats(
            total_income_approved=format_money(total_income),
            total_expense_approved=format_money(total_expense),
            balance=format_money(total_income - total_expense),
            pending_count=pending_count,
        )

    @staticmethod
    def _approved_sum(scope: Query, movement_type: CashMovementType) -> Decimal:
        total = (
            scope.filter(
                CashMovement.status.in_(APPROVED_STATUSES),
                CashMovement.type == movement_type,
            )
            .with_entities(func.sum(CashMovement.amount))
            .scalar()
        )
        return Decimal(total) if total is not None else Decimal("0")
