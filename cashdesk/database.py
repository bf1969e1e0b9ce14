# cashdesk/database.py

import logging
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from cashdesk.core.config import DATABASE_URL

logger = logging.getLogger(__name__)

# *****************************************************************
# 1. Engine
# *****************************************************************
if DATABASE_URL is None:
    logger.critical("La variable de entorno 'DATABASE_URL' no se encontró.")
    sys.exit(1)

# SQLite (tests / desarrollo local) necesita compartir la conexión entre hilos
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

# 2. Clase SessionLocal: una sesión por request.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Clase Base de la que heredan todos los modelos/tablas.
Base = declarative_base()


# Función de dependencia (Dependency Injection) para obtener una sesión de DB
def get_db():
    """Provee una sesión de base de datos a un endpoint de FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
