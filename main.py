import os
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging
from contextlib import asynccontextmanager

# === Agregar la carpeta raíz al PYTHONPATH ===
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

# === Cargar variables de entorno desde .env ===
dotenv_path = os.getenv('DOTENV_PATH', '.env')
load_dotenv(dotenv_path)

from apps.config.settings import settings

# === Configuración básica de logging ===
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# === Importar routers ===
from apps.clinic.router import clients_router, appointments_router, controls_router
from db.database import engine

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manejador de ciclo de vida (startup/shutdown) de la aplicación.
    Al apagar se cierran las conexiones del pool de la base de datos.
    """
    logger.info(f"{settings.app_name} iniciando (entorno: {settings.environment})...")

    yield

    logger.info(f"{settings.app_name} apagándose, cerrando conexiones...")
    await engine.dispose()


# === Inicializar la app de FastAPI ===
app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

# === Configurar CORS ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # ADVERTENCIA: Cambiar esto a los dominios específicos en producción
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Incluir routers ===
app.include_router(clients_router, prefix="/clients", tags=["Clientes"])
app.include_router(appointments_router, prefix="/appointments", tags=["Citas"])
app.include_router(controls_router, prefix="/controls", tags=["Controles"])

# === Ruta raíz de prueba ===
@app.get("/")
def root():
    return {"message": f"API de {settings.app_name} está corriendo."}
