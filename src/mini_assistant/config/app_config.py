# main app settings/configs
import os
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from mini_assistant.config.settings_mixins import (
    GoogleGenAISettingsMixin,
    LocalLLMSettingsMixin,
    ChatMemorySettingsMixin,
    ChunkIndexSettingsMixin,
)
from mini_assistant.common.db.models.documents.document_chunks import CHUNK_EMBEDDING_DIMENSION
from mini_assistant.common.logging.logger import logger
from functools import lru_cache

# Determine which environment we're in. Default to 'dev'.
APP_ENV = os.getenv("APP_ENV", "dev")

# Define the path to the .env file relative to this config file's location.
# This file is in src/mini_assistant/config/, so we go up three levels to the service root
# NOTE: the .env file names must match the APP_ENV config.
SERVICE_ROOT = Path(__file__).resolve().parents[3]
env_file_path = SERVICE_ROOT / f".env.{APP_ENV}"
logger.info(f"APP_ENV: {APP_ENV}")

class LLMBackend(str, Enum):
    """Model backends selectable from config."""
    GOOGLE_GENAI = "google_genai"
    LOCAL_OPENAI = "local_openai"

class DefaultSettings(BaseSettings):
    """
    The baseline, default settings that govern common functionalities.
    Passed in last to set low priority (allows overrides)
    """
    model_config = SettingsConfigDict(env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = os.getenv("APP_ENV", "dev")

class ServiceSettings(
    GoogleGenAISettingsMixin,
    LocalLLMSettingsMixin,
    ChatMemorySettingsMixin,
    ChunkIndexSettingsMixin,
    DefaultSettings # passed in last to set low priority
):
    """
    The main service settings.
    Setting mix-ins are passed in for different services/clients.
    """

    # which model backend answers queries
    LLM_PROVIDER: LLMBackend = LLMBackend.GOOGLE_GENAI

    # sampling settings shared by both answer phases
    LLM_TEMPERATURE: float = 0.3
    LLM_TOP_P: float = 0.4

    # caller-side timeout for a whole turn; None disables it
    ANSWER_TIMEOUT_SECONDS: Optional[float] = Field(default=60.0, gt=0)

    # FastAPI docs settings
    INCLUDE_DOCS: bool = False # by default disable, only enable in dev

    @model_validator(mode="after")
    def _embedding_size_matches_chunk_table(self) -> "ServiceSettings":
        # the pgvector column has a fixed dimension; the in-process index accepts any size
        if self.CHUNK_INDEX_DB_URL and self.GOOGLE_GENAI_EMBEDDING_SIZE != CHUNK_EMBEDDING_DIMENSION:
            raise ValueError(
                f"GOOGLE_GENAI_EMBEDDING_SIZE={self.GOOGLE_GENAI_EMBEDDING_SIZE} does not match "
                f"the document_chunks vector dimension {CHUNK_EMBEDDING_DIMENSION}"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=env_file_path, env_file_encoding="utf-8", extra="ignore"
    )

# use lru cache to return a cached instance of service settings
# NOTE: makes settings accessible from anywhere in the app, without being request-scope
@lru_cache()
def get_service_settings() -> ServiceSettings:
    return ServiceSettings() # type: ignore
