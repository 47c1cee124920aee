import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Tuple

PROJECT_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT_DIR, '.env'),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

    PROJECT_NAME: str = "Document Q&A Backend"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # --- Chunking & Retrieval Settings ---
    CHUNK_SIZE: int = 500  # words
    CHUNK_OVERLAP: int = 50  # words
    SEARCH_TOP_K: int = 5

    # --- Upload Settings ---
    ALLOWED_EXTENSIONS: Tuple[str, ...] = (".pdf", ".docx", ".pptx", ".txt", ".md", ".csv", ".xlsx", ".json")

    # --- LLM Settings ---
    DEFAULT_PROVIDER: str = "openai"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 1000
    LLM_REQUEST_TIMEOUT: float = 120.0  # seconds, enforced by the transport

    OPENAI_MODEL_NAME: str = "gpt-3.5-turbo"
    ANTHROPIC_MODEL_NAME: str = "claude-3-sonnet-20240229"
    ANTHROPIC_API_VERSION: str = "2023-06-01"
    OPENROUTER_MODEL_NAME: str = "mistralai/mistral-7b-instruct:free"
    GROQ_MODEL_NAME: str = "llama-3.1-8b-instant"
    GEMINI_MODEL_NAME: str = "gemini-1.5-flash"

    # Fallback keys for requests that arrive without one. Never logged.
    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    OPENROUTER_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None

    def api_key_for(self, provider: str) -> Optional[str]:
        """Returns the configured fallback key for a provider tag, if any."""
        return getattr(self, f"{str(provider).upper()}_API_KEY", None)

settings = Settings()
