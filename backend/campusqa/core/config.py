from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # API
    API_V1_PREFIX: str = "/api/v1"

    # CORS - can be comma-separated string or list
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Environment
    ENVIRONMENT: str = "development"

    # Voting / approval
    APPROVAL_THRESHOLD: int = 5
    POST_MAX_LENGTH: int = 2000

    # Chatbot retrieval
    SIMILARITY_THRESHOLD: float = 0.50
    RETRIEVAL_TOP_K: int = 3
    FALLBACK_MESSAGE: str = (
        "I don't have verified information about that yet. "
        "Try asking a question on the feed — if the community answers and votes it up, "
        "I'll be able to help with that in the future!"
    )

    # Upper bound for every embedding / LLM call (promotion and chat)
    PROMOTION_TIMEOUT_SECONDS: float = 30.0

    # LLM Configuration
    LLM_PROVIDER: str = "openai"
    MODEL_NAME: str = "gpt-4o-mini"

    # OpenAI-compatible endpoint
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = ""

    # Anthropic Configuration
    ANTHROPIC_API_KEY: str = ""

    # Ollama Configuration
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.1"
    OLLAMA_API_KEY: str = ""

    # Qdrant Configuration
    QDRANT_URL: str = "http://localhost:6333"
    QDRANT_API_KEY: str = ""
    KNOWLEDGE_COLLECTION: str = "approved_knowledge"

    # Embedding Model Configuration (Hugging Face)
    EMBEDDING_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
    EMBEDDING_MODEL_PATH: str = ""
    EMBEDDING_DEVICE: str = "cpu"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS string into list"""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]
        return self.CORS_ORIGINS

    class Config:
        env_file = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), ".env")
        case_sensitive = True
        extra = "ignore"


settings = Settings()
