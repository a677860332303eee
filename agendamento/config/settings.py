from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global Firebase + runtime configuration"""

    firebase_credentials: Optional[str] = None
    firebase_project_id: Optional[str] = None
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


class BookingSettings(BaseSettings):
    collection_name: str = "agendamentos"
    cache_path: str = ".cache/agendamentos.json"
    cache_key: str = "scheduling_appointments"

    class Config:
        env_prefix = "BOOKING_"
        env_file = ".env"


class AgendaSettings(BaseSettings):
    settings_collection: str = "configuracoes"
    config_document: str = "agenda"
    status_document: str = "status"

    class Config:
        env_prefix = "AGENDA_"
        env_file = ".env"


class AdminSettings(BaseSettings):
    # Set ADMIN_PASSWORD; with no password every login is refused.
    password: str = ""
    token_ttl_minutes: int = 30

    class Config:
        env_prefix = "ADMIN_"
        env_file = ".env"


settings = Settings()
booking_settings = BookingSettings()
agenda_settings = AgendaSettings()
admin_settings = AdminSettings()
