# cashdesk/api/v1/endpoints/platform.py
# type: ignore
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from cashdesk.database import get_db
from cashdesk.schemas.platform import OrganizationCreate, OrganizationInDB, BranchCreate, BranchInDB
from cashdesk.core.tenant import TenantUserContext
from cashdesk.api import policies
from cashdesk.services.organizations import OrganizationService
from cashdesk.services.branches import BranchService

router = APIRouter()


# ***************************************************************
# 1. Endpoints para ORGANIZATION
# ***************************************************************

@router.post("/organizations", response_model=OrganizationInDB, status_code=status.HTTP_201_CREATED, tags=["Organizations"])
def create_organization(
    organization_in: OrganizationCreate,
    db: Session = Depends(get_db),
    admin: TenantUserContext = Depends(policies.create_organization),  # 🔒 SOLO ADMIN
):
    """Crea una nueva organización. El slug se deriva del nombre si no se envía."""
    return OrganizationService(db).create(organization_in)


@router.get("/organizations", response_model=List[OrganizationInDB], tags=["Organizations"])
def read_organizations(
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_organizations),
):
    """Lista la organización del contexto actual (nunca otras)."""
    return OrganizationService(db).find_all_for_organization(identity.organization_id)


# ***************************************************************
# 2. Endpoints para BRANCH
# ***************************************************************

@router.post("/branches", response_model=BranchInDB, status_code=status.HTTP_201_CREATED, tags=["Branches"])
def create_branch(
    branch_in: BranchCreate,
    db: Session = Depends(get_db),
    admin: TenantUserContext = Depends(policies.create_branch),  # 🔒 ADMIN + branches.write
):
    """Crea una sucursal en la organización del usuario autenticado."""
    return BranchService(db).create(admin.organization_id, branch_in)


@router.get("/branches", response_model=List[BranchInDB], tags=["Branches"])
def read_branches(
    db: Session = Depends(get_db),
    identity: TenantUserContext = Depends(policies.read_branches),
):
    """Lista las sucursales de la organización, las más nuevas primero."""
    return BranchService(db).find_all(identity.organization_id)
