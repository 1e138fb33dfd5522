import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nested `one` calls allowed per conversion; None disables the guard
    max_depth: int | None = 100
    html_parser: str = "html.parser"  # BeautifulSoup tree builder for embedded HTML
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MARKTREE_",
        env_file=[os.getenv("ENV_FILE", ""), ".env"],
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
