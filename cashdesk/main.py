# cashdesk/main.py
# type: ignore

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from cashdesk.core import config
from cashdesk.core.errors import ErrorCodes
from cashdesk.database import Base, engine

# ***************************************************************
# 1. Importar todos los modelos para que SQLAlchemy los registre
# ***************************************************************
import cashdesk.models.platform  # Organization y Branch
import cashdesk.models.auth  # User, Role, Permission y tablas puente
import cashdesk.models.cashflow  # CashMovement

# ***************************************************************
# 2. Importar los Routers de API
# ***************************************************************
from cashdesk.api.v1.endpoints import auth
from cashdesk.api.v1.endpoints import platform
from cashdesk.api.v1.endpoints import users
from cashdesk.api.v1.endpoints import roles
from cashdesk.api.v1.endpoints import cash_movements
from cashdesk.api.v1.endpoints import cashflow

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Inicializar la aplicación FastAPI
app = FastAPI(
    title="Cashdesk Backend API",
    version="v1",
    description="Backend multi-organización para movimientos de caja por sucursal.",
)


# Función para crear las tablas al iniciar la app
def create_tables():
    """Crea todas las tablas de la base de datos si no existen."""
    Base.metadata.create_all(bind=engine)

create_tables()


# ***************************************************************
# 3. Manejo de errores: todo sale como {code, message}
# ***************************************************************
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        content = {"code": exc.detail["code"], "message": exc.detail.get("message", "")}
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        content = {"code": ErrorCodes.AUTH_INVALID_TOKEN, "message": str(exc.detail)}
    else:
        content = {"code": ErrorCodes.HTTP_ERROR, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(loc) for loc in error["loc"]) for error in exc.errors()]
    logger.warning("Error de validación en %s: %s", request.url.path, fields)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": ErrorCodes.VALIDATION_ERROR,
            "message": f"Datos inválidos: {', '.join(fields)}",
        },
    )


# ***************************************************************
# 4. Incluir los Routers
# ***************************************************************
app.include_router(auth.router, tags=["Auth"], prefix="/api/v1/auth")
app.include_router(platform.router, prefix="/api/v1")
app.include_router(users.router, tags=["Users"], prefix="/api/v1/users")
app.include_router(roles.router, tags=["Roles"], prefix="/api/v1/roles")
app.include_router(cash_movements.router, tags=["Cash Movements"], prefix="/api/v1/cash-movements")
app.include_router(cashflow.router, tags=["Cashflow"], prefix="/api/v1/cashflow")
