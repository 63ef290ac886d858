import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager

from apps.config.settings import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

if not DATABASE_URL:
    raise ValueError("DATABASE_URL no está configurada en las variables de entorno.")

engine_options = {"echo": settings.database_echo, "future": True}
if DATABASE_URL.startswith("sqlite"):
    # SQLite no comparte conexiones entre event loops.
    engine_options["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_options)

Base = declarative_base()

SessionLocal = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

@asynccontextmanager
async def get_db_session():
    async with SessionLocal() as session:
        try:
            logger.debug(f"DB: Sesión CREADA (ID: {id(session)})")
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"DB session rollback debido a error: {e}", exc_info=True)
            raise
        finally:
            logger.debug(f"DB: Sesión CERRADA (ID: {id(session)})")
            await session.close()
