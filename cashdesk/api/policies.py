# cashdesk/api/policies.py
# type: ignore

from cashdesk.core.authorization import AccessPolicy, ADMIN, MANAGER, OPERATOR
from cashdesk.seed import (
    BRANCHES_READ,
    BRANCHES_WRITE,
    CASH_MOVEMENTS_APPROVE,
    CASH_MOVEMENTS_CREATE,
    CASH_MOVEMENTS_DELIVER,
    CASH_MOVEMENTS_READ,
    CASHFLOW_STATS_READ,
    USERS_READ,
    USERS_WRITE,
)

# ***************************************************************
# Políticas nombradas, una por ruta protegida
# ***************************************************************

authenticated = AccessPolicy("authenticated")

# Organizaciones
create_organization = AccessPolicy("organizations.create", roles=[ADMIN])
read_organizations = authenticated

# Sucursales
create_branch = AccessPolicy("branches.create", roles=[ADMIN], permissions=[BRANCHES_WRITE])
read_branches = AccessPolicy("branches.list", permissions=[BRANCHES_READ])

# Movimientos de caja
create_cash_movement = AccessPolicy(
    "cashMovements.create", roles=[OPERATOR, ADMIN], permissions=[CASH_MOVEMENTS_CREATE]
)
read_cash_movements = AccessPolicy(
    "cashMovements.list", roles=[OPERATOR, MANAGER, ADMIN], permissions=[CASH_MOVEMENTS_READ]
)
approve_cash_movement = AccessPolicy(
    "cashMovements.approve", roles=[MANAGER, ADMIN], permissions=[CASH_MOVEMENTS_APPROVE]
)
deliver_cash_movement = AccessPolicy(
    "cashMovements.deliver", roles=[MANAGER, ADMIN], permissions=[CASH_MOVEMENTS_DELIVER]
)

# Estadísticas
read_cashflow_stats = AccessPolicy(
    "cashflow.stats", roles=[OPERATOR, MANAGER, ADMIN], permissions=[CASHFLOW_STATS_READ]
)

# Usuarios
read_users = AccessPolicy("users.list", permissions=[USERS_READ])
write_users = AccessPolicy("users.write", permissions=[USERS_WRITE])
