"""External configuration for Key Protect clients."""

from __future__ import annotations

from functools import lru_cache
from typing import Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVICE_NAME = "ibm_key_protect_api"
DEFAULT_SERVICE_URL = "https://us-south.kms.cloud.ibm.com"
PARAMETERIZED_SERVICE_URL = "https://{region}.kms.cloud.ibm.com"
DEFAULT_URL_VARIABLES = {"region": "us-south"}


class Settings(BaseSettings):
    """Per-service settings read from ``<SERVICE_NAME>_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="IBM_KEY_PROTECT_API_", case_sensitive=False)

    url: Optional[str] = Field(default=None)
    auth_type: str = Field(default="bearertoken")
    bearer_token: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    disable_ssl: bool = Field(default=False)
    timeout_seconds: float = Field(default=60)

    enable_retries: bool = Field(default=False)
    max_retries: int = Field(default=4)
    retry_interval: float = Field(default=30)

    log_level: str = Field(default="WARNING")


def env_prefix(service_name: str) -> str:
    return f"{service_name.upper().replace('-', '_')}_"


@lru_cache(maxsize=8)
def get_settings(service_name: str = DEFAULT_SERVICE_NAME) -> Settings:
    return Settings(_env_prefix=env_prefix(service_name))


def construct_service_url(variables: Optional[Mapping[str, str]] = None) -> str:
    resolved = dict(DEFAULT_URL_VARIABLES)
    for name, value in (variables or {}).items():
        if name not in DEFAULT_URL_VARIABLES:
            raise ValueError(f"'{name}' is an invalid variable name for the service URL.")
        resolved[name] = value
    return PARAMETERIZED_SERVICE_URL.format(**resolved)
