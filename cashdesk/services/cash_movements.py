# cashdesk/services/cash_movements.py
# type: ignore
"""
Motor de movimientos de caja.

Máquina de estados::

    PENDING -> APPROVED -> DELIVERED
    PENDING -> REJECTED

Cada transición se escribe con un UPDATE condicionado al estado de origen
(``WHERE id = ? AND organization_id = ? AND status = ?``) y se verifica la
cantidad de filas afectadas, así dos requests concurrentes sobre el mismo
movimiento no pueden aplicar la transición dos veces.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from cashdesk.core.authorization import OPERATOR, get_user_roles
from cashdesk.core.errors import ErrorCodes, api_error, conflict, forbidden, not_found
from cashdesk.core.tenant import TenantUserContext, require_user_branch_id, scoped_query
from cashdesk.models.cashflow import (
    REQUIRED_SOURCE_STATUS,
    CashMovement,
    CashMovementStatus,
)
from cashdesk.schemas.cashflow import (
    CashMovementCreate,
    CashMovementFilters,
    CashMovementInDB,
    MovementFilters,
)
from cashdesk.services.branches import BranchService, format_money

logger = logging.getLogger(__name__)


def movement_scope(
    db: Session,
    identity: TenantUserContext,
    filters: MovementFilters,
    is_operator: bool,
) -> Query:
    """
    Query base de movimientos: organización + rango de fechas + sucursal.

    Un OPERATOR queda fijado a su propia sucursal; si pide otra, 403. Para
    el resto de roles la sucursal pedida debe existir en la organización.
    """
    query = scoped_query(db, CashMovement, identity.organization_id)

    if filters.date_from:
        query = query.filter(CashMovement.created_at >= filters.date_from)
    if filters.date_to:
        query = query.filter(CashMovement.created_at <= filters.date_to)

    if is_operator:
        branch_id = require_user_branch_id(identity)
        if filters.branch_id and filters.branch_id != branch_id:
            logger.warning(
                "Operador %s intentó leer la sucursal %s (asignada: %s)",
                identity.sub, filters.branch_id, branch_id,
            )
            raise forbidden("Los operadores solo pueden acceder a los movimientos de su sucursal.")
        query = query.filter(CashMovement.branch_id == branch_id)
    elif filters.branch_id:
        BranchService(db).assert_exists(filters.branch_id, identity.organization_id)
        query = query.filter(CashMovement.branch_id == filters.branch_id)

    return query


def _check_amount(amount: Decimal) -> None:
    # Invariante de la entidad: positivo y con a lo sumo dos decimales
    if amount <= 0 or amount.as_tuple().exponent < -2:
        raise api_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorCodes.VALIDATION_ERROR,
            "El monto debe ser positivo y tener como máximo dos decimales.",
        )


class CashMovementService:
    def __init__(self, db: Session):
        self.db = db
        self.branches = BranchService(db)

    def _is_operator(self, identity: TenantUserContext) -> bool:
        return OPERATOR in get_user_roles(self.db, identity.sub)

    # ***************************************************************
    # 1. Alta
    # ***************************************************************
    def create(self, identity: TenantUserContext, movement_in: CashMovementCreate) -> CashMovementInDB:
        if self._is_operator(identity):
            # El operador siempre registra en su sucursal, se ignora la del request
            branch_id = require_user_branch_id(identity)
        else:
            branch_id = movement_in.branch_id or identity.branch_id

        if not branch_id:
            raise forbidden("Se requiere una sucursal para esta operación.")

        self.branches.assert_exists(branch_id, identity.organization_id)
        _check_amount(movement_in.amount)

        description = movement_in.description.strip() if movement_in.description else None
        movement = CashMovement(
            organization_id=identity.organization_id,
            branch_id=branch_id,
            type=movement_in.type,
            amount=movement_in.amount,
            description=description or None,
            status=CashMovementStatus.PENDING,
            created_by_id=identity.sub,
        )
        self.db.add(movement)
        self.db.commit()
        self.db.refresh(movement)

        logger.info(
            "Movimiento %s creado (%s %s) en sucursal %s por %s",
            movement.id, movement.type.value, movement.amount, branch_id, identity.sub,
        )
        return self.to_view(movement)

    # ***************************************************************
    # 2. Listado
    # ***************************************************************
    def find_all(self, identity: TenantUserContext, filters: CashMovementFilters) -> List[CashMovementInDB]:
        query = movement_scope(self.db, identity, filters, self._is_operator(identity))
        if filters.status:
            query = query.filter(CashMovement.status == filters.status)

        movements = query.order_by(CashMovement.created_at.desc()).all()
        return [self.to_view(movement) for movement in movements]

    # ***************************************************************
    # 3. Transiciones de estado
    # ***************************************************************
    def approve(self, identity: TenantUserContext, movement_id: UUID) -> CashMovementInDB:
        now = datetime.now(timezone.utc)
        return self._transition(
            identity,
            movement_id,
            CashMovementStatus.APPROVED,
            {"approved_by_id": identity.sub, "approved_at": now},
        )

    def reject(self, identity: TenantUserContext, movement_id: UUID) -> CashMovementInDB:
        # approved_by/approved_at registran a quien sacó el movimiento de PENDING
        now = datetime.now(timezone.utc)
        return self._transition(
            identity,
            movement_id,
            CashMovementStatus.REJECTED,
            {"approved_by_id": identity.sub, "approved_at": now},
        )

    def deliver(self, identity: TenantUserContext, movement_id: UUID) -> CashMovementInDB:
        now = datetime.now(timezone.utc)
        # Se conserva el aprobador original; solo se completa si faltara
        return self._transition(
            identity,
            movement_id,
            CashMovementStatus.DELIVERED,
            {
                "approved_by_id": func.coalesce(CashMovement.approved_by_id, identity.sub),
                "approved_at": func.coalesce(CashMovement.approved_at, now),
            },
        )

    def _get_scoped(self, identity: TenantUserContext, movement_id: UUID) -> Optional[CashMovement]:
        return scoped_query(self.db, CashMovement, identity.organization_id, id=movement_id).first()

    def _transition(
        self,
        identity: TenantUserContext,
        movement_id: UUID,
        next_status: CashMovementStatus,
        values: dict,
    ) -> CashMovementInDB:
        required_status = REQUIRED_SOURCE_STATUS[next_status]

        movement = self._get_scoped(identity, movement_id)
        if movement is None:
            raise not_found(ErrorCodes.CASH_MOVEMENT_NOT_FOUND, "Movimiento de caja no encontrado.")
        if movement.status != required_status:
            raise self._invalid_transition(movement.status, next_status)

        if next_status == CashMovementStatus.DELIVERED and movement.approved_by_id is None:
            # No debería existir un APPROVED sin aprobador: se completa y se deja registro
            logger.warning(
                "Movimiento %s APPROVED sin approved_by_id; se completa con %s al entregar",
                movement.id, identity.sub,
            )

        values = dict(values, status=next_status, updated_at=datetime.now(timezone.utc))
        affected = (
            scoped_query(
                self.db,
                CashMovement,
                identity.organization_id,
                id=movement_id,
                status=required_status,
            )
            .update(values, synchronize_session=False)
        )
        if affected != 1:
            # Otro request cambió el estado entre la lectura y la escritura
            self.db.rollback()
            current = self._get_scoped(identity, movement_id)
            if current is None:
                raise not_found(ErrorCodes.CASH_MOVEMENT_NOT_FOUND, "Movimiento de caja no encontrado.")
            raise self._invalid_transition(current.status, next_status)

        self.db.commit()
        movement = self._get_scoped(identity, movement_id)

        logger.info(
            "Movimiento %s: %s -> %s por %s",
            movement_id, required_status.value, next_status.value, identity.sub,
        )
        return self.to_view(movement)

    @staticmethod
    def _invalid_transition(current: CashMovementStatus, next_status: CashMovementStatus):
        return conflict(
            ErrorCodes.CASH_MOVEMENT_INVALID_STATUS_TRANSITION,
            f"Transición de estado inválida: {current.value} -> {next_status.value}.",
        )

    @staticmethod
    def to_view(movement: CashMovement) -> CashMovementInDB:
        return CashMovementInDB(
            id=movement.id,
            organization_id=movement.organization_id,
            branch_id=movement.branch_id,
            type=movement.type,
            amount=format_money(movement.amount),
            description=movement.description,
            status=movement.status,
            created_by_id=movement.created_by_id,
            approved_by_id=movement.approved_by_id,
            approved_at=movement.approved_at,
            created_at=movement.created_at,
        )
