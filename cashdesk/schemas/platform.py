# cashdesk/schemas/platform.py
# type: ignore
from pydantic import Field, ConfigDict, field_validator
from typing import Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime

from cashdesk.schemas.common import CamelModel, strip_text

# ***************************************************************
# 1. Schemas para ORGANIZATION
# ***************************************************************
class OrganizationCreate(CamelModel):
    """Schema de entrada para crear una Organización. El slug se deriva del nombre si falta."""
    name: str = Field(..., min_length=2, max_length=120)
    slug: Optional[str] = Field(None, min_length=3, max_length=80, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

    # Se recorta antes de validar el largo: "  a  " no es un nombre válido
    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return strip_text(value)

class OrganizationInDB(CamelModel):
    """Schema de salida para una Organización."""
    id: UUID
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

# ***************************************************************
# 2. Schemas para BRANCH (Sucursal)
# ***************************************************************
class BranchCreate(CamelModel):
    """Schema de entrada para crear una Sucursal.
    organization_id no se pide en el request, se toma del token."""
    name: str = Field(..., min_length=2, max_length=120)
    code: Optional[str] = Field(None, max_length=40)
    cash_limit: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("name", "code", mode="before")
    @classmethod
    def strip_fields(cls, value):
        return strip_text(value)

class BranchInDB(CamelModel):
    """Schema de salida para una Sucursal. cashLimit viaja como string decimal."""
    id: UUID
    organization_id: UUID
    name: str
    code: Optional[str] = None
    cash_limit: Optional[str] = None
    created_at: datetime
    updated_at: datetime
