"""Runtime settings for the NCPDP codec, ingestion pipeline and CLI."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

SUPPORTED_NCPDP_VERSION = "D0"


class NcpdpSettings(BaseSettings):
    """NCPDP ingestion and logging settings."""

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("json", alias="LOG_FORMAT")  # "json" or "console"
    log_file: Optional[str] = Field(None, alias="LOG_FILE")
    log_dir: str = Field("logs", alias="LOG_DIR")
    log_echo: bool = Field(False, alias="LOG_ECHO")  # also log to stderr when LOG_FILE is set

    default_file_path: str = Field("d0-samples/ncpdp_rx_claims.txt", alias="NCPDP_DEFAULT_FILE_PATH")
    stop_on_error: bool = Field(False, alias="NCPDP_STOP_ON_ERROR")
    # Warn (never reject) when STX carries a version other than D0
    strict_version: bool = Field(False, alias="NCPDP_STRICT_VERSION")

    production_mode: bool = Field(True, alias="EDI_PRODUCTION_MODE")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True  # Allow both field name and alias


@lru_cache
def get_settings() -> NcpdpSettings:
    """Return the process-wide settings instance."""
    return NcpdpSettings()
