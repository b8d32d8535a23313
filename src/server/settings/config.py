from typing import List

from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

# Only acceptable outside production
DEV_TOKEN_SECRET = "dev-insecure-token-secret"


def _csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    app_name: str = "Quote Builder API"
    version: str = "1.0.0"
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./quote_builder.db")
    debug: bool = os.getenv("DEBUG", "0") == "1"

    # Bearer tokens
    token_secret: str = os.getenv("TOKEN_SECRET") or DEV_TOKEN_SECRET
    token_ttl_seconds: int = int(os.getenv("TOKEN_TTL_SECONDS", str(7 * 24 * 3600)))
    password_iterations: int = int(os.getenv("PASSWORD_ITERATIONS", "210000"))

    # Pricing assistant
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4.1")
    ai_max_tokens: int = int(os.getenv("AI_MAX_TOKENS", "1024"))

    cors_origins: List[str] = _csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5500,http://127.0.0.1:5500",
        )
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def check_secrets(self) -> None:
        """Raises RuntimeError when production would run on the development token secret."""
        if self.is_production and self.token_secret == DEV_TOKEN_SECRET:
            raise RuntimeError("TOKEN_SECRET must be set when ENVIRONMENT=production")


settings = Settings()
