"""Client settings, read from the environment."""

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    api_url: str = "http://localhost:8000/api"
    api_token: str | None = None
    timeout: float = Field(default=10.0, gt=0)
    transport: str = "http"
    locale: str = "vi"
    env: str = "development"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {
            "api_url": environ.get("STOREFRONT_API_URL"),
            "api_token": environ.get("STOREFRONT_API_TOKEN"),
            "timeout": environ.get("STOREFRONT_TIMEOUT"),
            "transport": environ.get("STOREFRONT_TRANSPORT"),
            "locale": environ.get("STOREFRONT_LOCALE"),
            "env": environ.get("STOREFRONT_ENV") or environ.get("ENVIRONMENT"),
        }
        return cls(**{k: v for k, v in values.items() if v})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
