"""Application configuration with environment variable validation."""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from google.oauth2 import service_account
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


@dataclass(frozen=True)
class WarehouseCredentials:
    """Service-account credentials, either a key file or its inline JSON."""

    keyfile: str | None = None
    info: dict[str, Any] | None = None


@dataclass(frozen=True)
class OfferTableSchema:
    """Location and column names of the VIN → offers table."""

    table_id: str
    vin_column: str = "vin"
    primary_column: str = "oferta_principal_r"
    offers_column: str = "ofertas_r"
    status_column: str = "status_cliente_principal"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # BigQuery
    google_project_id: str = Field(default="", validation_alias="GOOGLE_PROJECT_ID")
    credentials_file: str = Field(
        default="", validation_alias="GOOGLE_APPLICATION_CREDENTIALS"
    )
    credentials_json: str = Field(
        default="", validation_alias="GOOGLE_APPLICATION_CREDENTIALS_JSON"
    )
    bq_dataset: str = Field(default="Ofertas_Comerciales", validation_alias="BQ_DATASET")
    bq_table: str = Field(default="vin_ofertas_consolidado", validation_alias="BQ_TABLE")
    bq_vin_column: str = Field(default="vin", validation_alias="BQ_VIN_COLUMN")
    bq_primary_column: str = Field(
        default="oferta_principal_r", validation_alias="BQ_PRIMARY_COLUMN"
    )
    bq_offers_column: str = Field(default="ofertas_r", validation_alias="BQ_OFFERS_COLUMN")
    bq_status_column: str = Field(
        default="status_cliente_principal", validation_alias="BQ_STATUS_COLUMN"
    )
    bq_usage_dataset: str = Field(
        default="Ofertas_Comerciales", validation_alias="BQ_USAGE_DATASET"
    )
    bq_usage_table: str = Field(default="uso_herramienta", validation_alias="BQ_USAGE_TABLE")

    # Google Sign-In
    google_client_id: str = Field(default="", validation_alias="GOOGLE_CLIENT_ID")
    allowed_email_domain: str = Field(
        default="grupogranauto.mx", validation_alias="ALLOWED_EMAIL_DOMAIN"
    )

    # Usage audit
    usage_timezone: str = Field(
        default="America/Mexico_City", validation_alias="USAGE_TIMEZONE"
    )

    # API settings
    allowed_origins: str = Field(default="*", validation_alias="ALLOWED_ORIGINS")
    port: int = Field(default=8080, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    rate_limit: str = Field(default="60/minute", validation_alias="RATE_LIMIT")

    @property
    def cors_origins(self) -> list[str]:
        """Parse ALLOWED_ORIGINS from a comma-separated string."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def offer_table(self) -> OfferTableSchema:
        return OfferTableSchema(
            table_id=f"{self.google_project_id}.{self.bq_dataset}.{self.bq_table}",
            vin_column=self.bq_vin_column,
            primary_column=self.bq_primary_column,
            offers_column=self.bq_offers_column,
            status_column=self.bq_status_column,
        )

    @property
    def usage_table_id(self) -> str:
        return f"{self.google_project_id}.{self.bq_usage_dataset}.{self.bq_usage_table}"

    def warehouse_credentials(self) -> WarehouseCredentials:
        """Resolve the credential source; inline JSON wins over a key file.

        Raises ValueError when neither is set or the inline JSON is malformed.
        """
        if self.credentials_json:
            try:
                info = json.loads(self.credentials_json)
            except json.JSONDecodeError as e:
                raise ValueError(
                    "GOOGLE_APPLICATION_CREDENTIALS_JSON is not valid JSON"
                ) from e
            if not isinstance(info, dict):
                raise ValueError("GOOGLE_APPLICATION_CREDENTIALS_JSON must be an object")
            return WarehouseCredentials(info=info)
        if self.credentials_file:
            return WarehouseCredentials(keyfile=self.credentials_file)
        raise ValueError(
            "GOOGLE_APPLICATION_CREDENTIALS or GOOGLE_APPLICATION_CREDENTIALS_JSON is required"
        )


def load_service_account(creds: WarehouseCredentials) -> service_account.Credentials:
    """Build service-account credentials.

    Raises ValueError for incomplete key data and OSError for an unreadable
    key file.
    """
    if creds.info is not None:
        return service_account.Credentials.from_service_account_info(creds.info)
    return service_account.Credentials.from_service_account_file(creds.keyfile)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def validate_settings(settings: Settings | None = None) -> None:
    """Validate required settings and build the credentials once."""
    settings = settings or get_settings()
    errors = []

    if not settings.google_project_id:
        errors.append("GOOGLE_PROJECT_ID is required")
    try:
        load_service_account(settings.warehouse_credentials())
    except (ValueError, OSError) as e:
        errors.append(f"Invalid warehouse credentials: {e}")
    try:
        ZoneInfo(settings.usage_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"USAGE_TIMEZONE {settings.usage_timezone!r} is not a known time zone")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")
