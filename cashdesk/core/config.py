# cashdesk/core/config.py

import os

from dotenv import load_dotenv

# ***************************************************************
# 1. Carga del archivo .env
# ***************************************************************
# El .env vive en la raíz del proyecto (un nivel arriba del paquete).
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

# ***************************************************************
# 2. Base de datos
# ***************************************************************
DATABASE_URL = os.getenv("DATABASE_URL")

# ***************************************************************
# 3. JWT
# ***************************************************************
# ¡Cambia esto en producción! Se carga del .env
SECRET_KEY = os.getenv("SECRET_KEY", "CLAVE_DE_DESARROLLO_CAMBIAR_EN_PRODUCCION")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# ***************************************************************
# 4. Logging y bootstrap
# ***************************************************************
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Usuario existente al que el seed le asigna el rol ADMIN (opcional)
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL")
