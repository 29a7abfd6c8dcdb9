from datetime import date
from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración del motor de turnos utilizando Pydantic BaseSettings.
    Carga automáticamente las variables de entorno.
    """

    PROJECT_NAME: str = "Clinic Scheduling Engine"
    VERSION: str = "0.1.0"

    # Application Settings
    DEBUG: bool = Field(False, description="Modo de depuración")
    ENVIRONMENT: str = Field("production", description="Entorno de ejecución")
    LOG_LEVEL: str = Field("INFO", description="Nivel de logging (DEBUG, INFO, WARNING, ERROR)")
    LOG_FORMAT: str = Field("colored", description="Formato de logs: colored, json o plain")
    LOG_FILE: str | None = Field(None, description="Archivo opcional para logs en JSON")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="Host de PostgreSQL")
    DB_PORT: int = Field(5432, description="Puerto de PostgreSQL")
    DB_NAME: str = Field("clinic", description="Nombre de la base de datos")
    DB_USER: str = Field("postgres", description="Usuario de PostgreSQL")
    DB_PASSWORD: str | None = Field(None, description="Contraseña de PostgreSQL")
    DB_ECHO: bool = Field(False, description="Log SQL queries (solo para debug)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Tamaño del pool de conexiones")
    DB_MAX_OVERFLOW: int = Field(30, description="Máximo overflow del pool")
    DB_POOL_RECYCLE: int = Field(3600, description="Reciclar conexiones cada X segundos")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout para obtener conexión del pool")

    # Redis Settings
    REDIS_HOST: str = Field("localhost", description="Host de Redis")
    REDIS_PORT: int = Field(6379, description="Puerto de Redis")
    REDIS_DB: int = Field(0, description="Base de datos de Redis")
    REDIS_PASSWORD: str | None = Field(None, description="Contraseña de Redis")

    # Clinic
    CLINIC_TIMEZONE: str = Field("America/Argentina/Buenos_Aires", description="Zona horaria de la clínica")

    # Scheduling rules
    # Días como enteros separados por coma (0=lunes ... 6=domingo)
    SCHEDULING_WORKING_DAYS: str = Field("0,1,2,3,4", description="Días laborables de la clínica")
    SCHEDULING_WORKING_HOURS_START: str = Field("08:00", description="Inicio del horario de atención")
    SCHEDULING_WORKING_HOURS_END: str = Field("18:00", description="Fin del horario de atención")
    SCHEDULING_SLOT_GRANULARITY_MINUTES: int = Field(30, description="Granularidad de los turnos en minutos")
    SCHEDULING_MIN_DURATION_MINUTES: int = Field(15, description="Duración mínima de un turno")
    SCHEDULING_MAX_DURATION_MINUTES: int = Field(180, description="Duración máxima de un turno")
    SCHEDULING_MIN_LEAD_TIME_MINUTES: int = Field(120, description="Anticipación mínima para reservar")
    SCHEDULING_MAX_HORIZON_DAYS: int = Field(90, description="Máximos días hacia adelante para reservar")
    SCHEDULING_BUFFER_MINUTES: int = Field(0, description="Tiempo libre entre turnos del mismo doctor")
    SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_DAY: int | None = Field(
        3, description="Máximo de turnos activos por paciente por día (vacío = sin límite)"
    )
    SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_MONTH: int | None = Field(
        10, description="Máximo de turnos activos por paciente por mes (vacío = sin límite)"
    )
    # Fechas ISO separadas por coma (feriados, cierres de la clínica)
    SCHEDULING_CLOSED_DATES: str = Field("", description="Fechas sin atención")
    SCHEDULING_SUGGESTION_WINDOW_MINUTES: int = Field(
        120, description="Ventana para sugerir horarios alternativos"
    )

    # Availability cache
    AVAILABILITY_CACHE_BACKEND: str = Field("memory", description="Backend del cache de disponibilidad: memory o redis")
    AVAILABILITY_CACHE_TTL_SECONDS: int = Field(1800, description="TTL de respaldo del cache de disponibilidad")
    AVAILABILITY_CACHE_MAX_SIZE: int = Field(5000, description="Máximo de entradas en memoria")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorar campos extras en lugar de generar un error
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("SCHEDULING_SLOT_GRANULARITY_MINUTES")
    @classmethod
    def validate_granularity(cls, v):
        if v < 1 or v > 24 * 60:
            raise ValueError("SCHEDULING_SLOT_GRANULARITY_MINUTES must be between 1 and 1440")
        return v

    @field_validator("SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_DAY", "SCHEDULING_MAX_PATIENT_APPOINTMENTS_PER_MONTH", mode="before")
    @classmethod
    def parse_optional_limit(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("AVAILABILITY_CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v):
        if v not in ("memory", "redis"):
            raise ValueError("AVAILABILITY_CACHE_BACKEND must be 'memory' or 'redis'")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @property
    def working_days(self) -> list[int]:
        """Días laborables como enteros (0=lunes)."""
        days = [int(day.strip()) for day in self.SCHEDULING_WORKING_DAYS.split(",") if day.strip()]
        for day in days:
            if not 0 <= day <= 6:
                raise ValueError("Working days must be between 0 (Monday) and 6 (Sunday)")
        return days

    @property
    def closed_dates(self) -> list[date]:
        """Fechas sin atención."""
        return [date.fromisoformat(item.strip()) for item in self.SCHEDULING_CLOSED_DATES.split(",") if item.strip()]

    @computed_field
    @property
    def async_database_url(self) -> str:
        """Construye la URL de conexión asíncrona a PostgreSQL"""
        if self.DB_PASSWORD:
            return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql+asyncpg://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def redis_url(self) -> str:
        """Construye la URL de conexión a Redis"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """Determina si está en modo desarrollo"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Singleton para configuración
_settings_instance = None


def get_settings() -> Settings:
    """
    Retorna una instancia cacheada de la configuración.
    Esto evita cargar las variables de entorno múltiples veces.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
