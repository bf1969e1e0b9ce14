# cashdesk/schemas/auth.py
#type: ignore

from pydantic import BaseModel, Field, field_serializer, field_validator, ConfigDict
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from cashdesk.schemas.common import CamelModel

# ***************************************************************
# 1. Schemas de Autenticación (JWT)
# ***************************************************************
class Token(BaseModel):
    """Modelo para la respuesta de un token de acceso."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    roles: List[str] = []

class TokenPayload(BaseModel):
    """Modelo para la carga útil (payload) del JWT."""
    sub: Optional[str] = None
    sid: Optional[str] = None
    organization_id: Optional[str] = None
    branch_id: Optional[str] = None
    type: Optional[str] = None
    exp: Optional[int] = None

# ***************************************************************
# 2. Schemas de Usuario (Request/Response)
# ***************************************************************
class UserLogin(BaseModel):
    """Schema para la solicitud de login."""
    email: str = Field(..., max_length=255)
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserCreate(CamelModel):
    """Schema para la creación de un usuario dentro de la organización del creador."""
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)
    roles: List[str] = Field(default_factory=list)
    branch_id: Optional[UUID] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserUpdate(CamelModel):
    """Schema para la actualización de un usuario (campos opcionales)."""
    is_active: Optional[bool] = None
    branch_id: Optional[UUID] = None  # Permitir mover el usuario de sucursal
    password: Optional[str] = Field(None, min_length=6)
    roles: Optional[List[str]] = None


class UserInDB(CamelModel):
    """Schema para la representación del usuario desde la DB (sin hash)."""
    id: UUID
    email: str
    is_active: bool
    organization_id: UUID
    branch_id: Optional[UUID] = None
    roles: List[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    # Serializador: datetime -> ISO 8601 en la respuesta
    @field_serializer("created_at", when_used="always")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class CurrentUser(UserInDB):
    """Usuario autenticado con sus permisos efectivos."""
    permissions: List[str]


# ***************************************************************
# 3. Schemas de Roles
# ***************************************************************
class RoleInDB(BaseModel):
    """Esquema para devolver el Rol con su ID."""
    id: UUID
    name: str
    description: Optional[str] = None

    # Configuración para que Pydantic pueda leer modelos SQLAlchemy
    model_config = ConfigDict(from_attributes=True)

class RoleList(BaseModel):
    """Esquema para la respuesta del endpoint que lista todos los roles."""
    roles: list[RoleInDB]
