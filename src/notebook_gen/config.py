from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from notebook_gen.errors import CredentialMissing

DEFAULT_MODEL = "gpt-3.5-turbo"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str = Field(default="", validation_alias=AliasChoices("OPENAI_TOKEN", "OPENAI_API_KEY"))
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    openai_model: str = Field(default=DEFAULT_MODEL, alias="OPENAI_MODEL")
    llm_timeout_seconds: float = Field(default=60.0, alias="LLM_TIMEOUT_SECONDS")

    converter_executable: str = Field(default="pandoc", alias="NOTEBOOK_CONVERTER")
    converter_timeout_seconds: float = Field(default=120.0, alias="CONVERTER_TIMEOUT_SECONDS")
    transient_dir: str = Field(default="", alias="NOTEBOOK_TRANSIENT_DIR")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    def require_api_key(self) -> str:
        key = self.openai_api_key.strip()
        if not key:
            raise CredentialMissing("OPENAI_TOKEN not set (OPENAI_API_KEY is accepted as well)")
        return key

    def transient_path(self) -> Path | None:
        directory = self.transient_dir.strip()
        return Path(directory) if directory else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
