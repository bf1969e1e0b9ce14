# cashdesk/services/organizations.py
# type: ignore

import logging
import re
from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cashdesk.core.errors import ErrorCodes, api_error, conflict
from cashdesk.models.platform import SLUG_MAX_LENGTH, Organization
from cashdesk.schemas.platform import OrganizationCreate

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """'My Org!!' -> 'my-org', recortado al largo de la columna."""
    slug = _NON_ALNUM.sub("-", value.strip().lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


class OrganizationService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, organization_in: OrganizationCreate) -> Organization:
        slug = slugify(organization_in.slug or organization_in.name)
        if not slug:
            raise api_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                ErrorCodes.VALIDATION_ERROR,
                "No se pudo derivar un slug válido del nombre.",
            )

        # Validación previa de unicidad; el constraint de la DB cubre la carrera
        if self.db.query(Organization).filter(Organization.slug == slug).first():
            raise self._slug_conflict()

        organization = Organization(name=organization_in.name.strip(), slug=slug)
        self.db.add(organization)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise self._slug_conflict() from e
        self.db.refresh(organization)

        logger.info("Organización creada id=%s slug=%s", organization.id, slug)
        return organization

    def find_all_for_organization(self, organization_id: UUID) -> List[Organization]:
        return (
            self.db.query(Organization)
            .filter(Organization.id == organization_id)
            .order_by(Organization.created_at.desc())
            .all()
        )

    @staticmethod
    def _slug_conflict():
        return conflict(ErrorCodes.ORGANIZATION_SLUG_ALREADY_EXISTS, "El slug de la organización ya existe.")
