from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PORT = 3000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    port: int = Field(default=DEFAULT_PORT, alias="PORT", ge=0, le=65535)
    host: str = Field(default="0.0.0.0", alias="HOST")
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["plain", "json"] = Field(default="plain", alias="LOG_FORMAT")
    metrics_route_label: Literal["template", "path"] = Field(default="template", alias="METRICS_ROUTE_LABEL")

    @field_validator("port", mode="before")
    @classmethod
    def _blank_port_means_default(cls, value: object) -> object:
        # PORT= (set but empty) behaves like an unset variable.
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PORT
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
