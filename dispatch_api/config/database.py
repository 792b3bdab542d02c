# dispatch_api/config/database.py
import logging
import time
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .settings import settings

logger = logging.getLogger(__name__)

engine_kwargs = {
    "pool_pre_ping": True,
    "echo": settings.debug
}

# SQLite (tests / desarrollo local) comparte conexiones entre hilos del threadpool
if settings.is_sqlite:
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_recycle"] = 300
    engine_kwargs["connect_args"] = {"connect_timeout": 10}

# Create engine
engine = create_engine(settings.database_url, **engine_kwargs)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

# Database dependency
def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_database(
    bind: Optional[Engine] = None,
    max_retries: Optional[int] = None,
    retry_interval: Optional[float] = None,
    max_interval: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Esperar a que la base de datos acepte conexiones.

    Se ejecuta una sola vez al arrancar el proceso. Cada intento fallido espera
    ``retry_interval * 2**intento`` segundos (con tope en ``max_interval``).
    Si se agotan los reintentos se relanza el último ``OperationalError``.
    """
    bind = bind or engine
    max_retries = settings.db_connect_max_retries if max_retries is None else max_retries
    retry_interval = settings.db_connect_retry_interval if retry_interval is None else retry_interval
    max_interval = settings.db_connect_retry_max_interval if max_interval is None else max_interval

    attempt = 0
    while True:
        try:
            with bind.connect() as connection:
                connection.execute(text("SELECT 1"))
            logger.info("✅ Conectado a la base de datos")
            return
        except OperationalError as e:
            if attempt >= max_retries:
                logger.error(f"❌ Error conectando a la base de datos: {e} - sin más reintentos")
                raise
            delay = min(retry_interval * (2 ** attempt), max_interval)
            attempt += 1
            logger.warning(
                f"⚠️ Error conectando a la base de datos: {e} - "
                f"reintento {attempt}/{max_retries} en {delay:.1f}s"
            )
            sleep(delay)


def init_db(bind: Optional[Engine] = None, **retry_kwargs) -> None:
    """Esperar conexión y crear las tablas que falten"""
    # Importar modelos para registrarlos en Base.metadata
    from dispatch_api.shared.database import models  # noqa: F401

    bind = bind or engine
    wait_for_database(bind, **retry_kwargs)
    Base.metadata.create_all(bind=bind)
    logger.info("🗄️  Esquema de base de datos listo")


def check_database(bind: Optional[Engine] = None) -> bool:
    """Health check de la base de datos (un único intento)"""
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Base de datos no disponible: {e}")
        return False
