# cashdesk/services/branches.py
# type: ignore

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cashdesk.core.errors import ErrorCodes, conflict, not_found
from cashdesk.core.tenant import scoped_query
from cashdesk.models.platform import Branch
from cashdesk.schemas.platform import BranchCreate, BranchInDB

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def format_money(value: Optional[Decimal]) -> Optional[str]:
    """Decimal -> string con dos decimales (nunca float)."""
    if value is None:
        return None
    return str(Decimal(value).quantize(CENTS))


class BranchService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, organization_id: UUID, branch_in: BranchCreate) -> BranchInDB:
        name = branch_in.name.strip()
        code = branch_in.code.strip() if branch_in.code else None

        if scoped_query(self.db, Branch, organization_id, name=name).first():
            raise self._name_conflict()

        branch = Branch(
            organization_id=organization_id,
            name=name,
            code=code,
            cash_limit=branch_in.cash_limit,
        )
        self.db.add(branch)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise self._name_conflict() from e
        self.db.refresh(branch)

        logger.info("Sucursal creada id=%s organization=%s", branch.id, organization_id)
        return self.to_view(branch)

    def find_all(self, organization_id: UUID) -> List[BranchInDB]:
        branches = (
            scoped_query(self.db, Branch, organization_id)
            .order_by(Branch.created_at.desc())
            .all()
        )
        return [self.to_view(branch) for branch in branches]

    def assert_exists(self, branch_id: UUID, organization_id: UUID) -> Branch:
        """Lanza 404 si la sucursal no existe dentro de la organización."""
        branch = scoped_query(self.db, Branch, organization_id, id=branch_id).first()
        if branch is None:
            raise not_found(ErrorCodes.BRANCH_NOT_FOUND, "Sucursal no encontrada.")
        return branch

    @staticmethod
    def to_view(branch: Branch) -> BranchInDB:
        return BranchInDB(
            id=branch.id,
            organization_id=branch.organization_id,
            name=branch.name,
            code=branch.code,
            cash_limit=format_money(branch.cash_limit),
            created_at=branch.created_at,
            updated_at=branch.updated_at,
        )

    @staticmethod
    def _name_conflict():
        return conflict(ErrorCodes.BRANCH_ALREADY_EXISTS, "Ya existe una sucursal con ese nombre en la organización.")
