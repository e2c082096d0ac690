from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # Database (high-privilege credential, used for all writes)
    DATABASE_URL: str = ""

    # API
    API_V1_PREFIX: str = "/api/v1"

    # CORS - can be comma-separated string or list
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Identity service (low-privilege key, used only to resolve the caller)
    AUTH_URL: str = ""
    AUTH_ANON_KEY: str = ""
    AUTH_TIMEOUT_SECONDS: float = 10.0

    # LLM Configuration
    LLM_PROVIDER: str = "gemini"
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # OpenAI / Anthropic (via LangChain)
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    MODEL_NAME: str = ""

    # Billing defaults
    DEFAULT_TAX_RATE: float = 20.0
    DEFAULT_CURRENCY: str = "TRY"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS string into list"""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return self.CORS_ORIGINS

    @property
    def llm_api_key_name(self) -> str:
        """Name of the API key setting the active LLM provider needs"""
        return {
            "gemini": "GEMINI_API_KEY",
            "openai": "OPENAI_API_KEY",
            "anthropic": "ANTHROPIC_API_KEY",
        }.get(self.LLM_PROVIDER.lower(), "GEMINI_API_KEY")

    class Config:
        env_file = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), ".env")
        case_sensitive = True
        extra = "ignore"


settings = Settings()
