from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Clinic Records API"
    environment: str = "development"
    database_url: Optional[str] = None
    database_echo: bool = False
    log_level: str = "INFO"
    # Si es True, revisar un control re-apunta la cita a su sucesor.
    advance_appointment_on_revision: bool = False

settings = Settings()
