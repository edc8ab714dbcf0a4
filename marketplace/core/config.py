from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_PATH = Path(__file__).resolve().parents[2] / ".env"


class ServiceSettings(BaseSettings):
    """
    Settings shared by every service. One `.env` can serve all three
    processes, so anything that must differ per process (port, storage file)
    is read from a service-prefixed key.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_PATH, env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # App
    service_name: str = "marketplace"
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = Field(default=True, validation_alias="DEBUG_MODE")
    log_level: str = "INFO"

    # Telemetry
    otel_enabled: bool = False
    otlp_endpoint: str = "http://localhost:4318"  # Jaeger OTLP HTTP


class ListingServiceSettings(ServiceSettings):
    service_name: str = "listing-service"
    port: int = Field(default=6000, validation_alias="LISTING_PORT")

    # Storage
    db_path: str = Field(default="listings.db", validation_alias="LISTING_DB_PATH")


class UserServiceSettings(ServiceSettings):
    service_name: str = "user-service"
    port: int = Field(default=7000, validation_alias="USER_PORT")

    # Storage
    db_path: str = Field(default="users.db", validation_alias="USER_DB_PATH")


class PublicApiSettings(ServiceSettings):
    service_name: str = "public-api"
    port: int = Field(default=8000, validation_alias="PUBLIC_API_PORT")

    # Downstream services
    listing_service_url: str = "http://localhost:6000"
    user_service_url: str = "http://localhost:7000"

    # 1 = strictly sequential owner lookups
    user_lookup_concurrency: int = Field(default=4, ge=1)


def env_key(settings_cls: type[ServiceSettings], field: str) -> str:
    """Key a setting is read under, used to pass overrides the same way."""
    alias = settings_cls.model_fields[field].validation_alias
    return alias if isinstance(alias, str) else field
