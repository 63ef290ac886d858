import asyncio
import logging
from dotenv import load_dotenv

load_dotenv()

from apps.config.settings import settings
from db.database import engine, Base
from db.models import Client, Appointment, Control  # noqa: F401

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

async def init_models():
    async with engine.begin() as conn:
        if settings.environment == "development":
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("Todas las tablas eliminadas.")

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tablas creadas correctamente.")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_models())
