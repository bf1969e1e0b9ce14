# cashdesk/core/errors.py

from fastapi import HTTPException, status


class ErrorCodes:
    """Códigos estables (legibles por máquina) que viajan en cada error de la API."""

    # Autenticación
    AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_USER_INACTIVE = "AUTH_USER_INACTIVE"

    # Autorización
    ACCESS_DENIED = "ACCESS_DENIED"
    ROLE_REQUIRED = "ROLE_REQUIRED"
    PERMISSION_REQUIRED = "PERMISSION_REQUIRED"

    # Organizaciones y sucursales
    ORGANIZATION_SLUG_ALREADY_EXISTS = "ORGANIZATION_SLUG_ALREADY_EXISTS"
    BRANCH_ALREADY_EXISTS = "BRANCH_ALREADY_EXISTS"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"

    # Movimientos de caja
    CASH_MOVEMENT_NOT_FOUND = "CASH_MOVEMENT_NOT_FOUND"
    CASH_MOVEMENT_INVALID_STATUS_TRANSITION = "CASH_MOVEMENT_INVALID_STATUS_TRANSITION"

    # Usuarios
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    USER_ROLE_REQUIRED = "USER_ROLE_REQUIRED"
    USER_INVALID_ROLE = "USER_INVALID_ROLE"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    HTTP_ERROR = "HTTP_ERROR"


# ***************************************************************
# Fábricas de HTTPException con detalle {code, message}
# ***************************************************************

def api_error(status_code: int, code: str, message: str, headers: dict = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"code": code, "message": message},
        headers=headers,
    )


def unauthorized(code: str, message: str = "No autorizado.") -> HTTPException:
    return api_error(
        status.HTTP_401_UNAUTHORIZED, code, message, headers={"WWW-Authenticate": "Bearer"}
    )


def forbidden(message: str = "Acceso denegado.", code: str = ErrorCodes.ACCESS_DENIED) -> HTTPException:
    return api_error(status.HTTP_403_FORBIDDEN, code, message)


def not_found(code: str, message: str) -> HTTPException:
    return api_error(status.HTTP_404_NOT_FOUND, code, message)


def conflict(code: str, message: str) -> HTTPException:
    return api_error(status.HTTP_409_CONFLICT, code, message)
