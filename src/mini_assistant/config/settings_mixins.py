# mixin settings for external services like llm, embeddings, memory db, chunk index
from typing import Optional
from pydantic import BaseModel, Field

class GoogleGenAISettingsMixin(BaseModel):
    """
    Model for Google GenAI LLM + embedding client settings.
    NOTE: the API key is optional at import time; the hosted client refuses to build without it.
    """
    GOOGLE_GENAI_API_KEY: Optional[str] = None
    GOOGLE_GENAI_MODEL: str = Field(default="gemini-2.5-flash", description="Hosted model used for both answer phases.")
    GOOGLE_GENAI_EMBEDDING_MODEL: str = Field(default="gemini-embedding-001")
    GOOGLE_GENAI_EMBEDDING_SIZE: int = Field(default=768, description="Must match the chunk index vector dimension.")

class LocalLLMSettingsMixin(BaseModel):
    """
    Model for an OpenAI-compatible local / on-device model endpoint.
    """
    LOCAL_LLM_BASE_URL: str = Field(default="http://localhost:11434/v1")
    LOCAL_LLM_MODEL: str = Field(default="gemma3:4b")
    LOCAL_LLM_API_KEY: str = Field(default="local", description="Most local servers ignore the key but the SDK requires one.")

class ChatMemorySettingsMixin(BaseModel):
    """
    Model for the bounded conversation memory.
    """
    CHAT_MEMORY_CAPACITY: int = Field(default=10, ge=1, description="Number of recent turns replayed into prompts.")
    CHAT_MEMORY_DB_URL: Optional[str] = Field(default=None, description="SQLAlchemy async URL; None keeps memory in-process.")

class ChunkIndexSettingsMixin(BaseModel):
    """
    Model for the document chunk index used by the retrieval tool.
    """
    CHUNK_INDEX_DB_URL: Optional[str] = Field(default=None, description="Postgres + pgvector async URL; None uses the in-process index.")
    CHUNK_INDEX_POOL_SIZE: int = Field(default=5, description="Number of connections to keep in the pool.")
    CHUNK_INDEX_MAX_OVERFLOW: int = Field(default=10, description="Max 'overflow' connections beyond pool_size.")
