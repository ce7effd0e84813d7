"""Configuration management for the Supper Club service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import List, Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _split_terms(raw: Optional[str]) -> List[str]:
    """Split a comma-separated env value into lowercase, non-empty terms."""
    if not raw:
        return []
    return [term.strip().lower() for term in raw.split(",") if term.strip()]


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Generation service (Gemini). Optional: without a key every topic request
        # is served by the local template fallback.
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Primary model, tried first for every generation request
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Secondary model, tried after a retryable failure of the primary
        self.GEMINI_FALLBACK_MODEL: str = os.getenv("GEMINI_FALLBACK_MODEL", "gemini-2.5-flash-lite")
        # Total attempts across the model list (capped at 4)
        self.GENERATION_MAX_ATTEMPTS: int = int(os.getenv("GENERATION_MAX_ATTEMPTS", "2"))
        # Per-attempt timeout for the generation call, in seconds
        self.GENERATION_TIMEOUT_SECONDS: float = float(os.getenv("GENERATION_TIMEOUT_SECONDS", "12"))
        # Temperature: higher values give more varied starters across calls
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.9"))
        # Maximum words kept per generated sentence (hard cut at word boundary)
        self.TOPIC_MAX_WORDS: int = int(os.getenv("TOPIC_MAX_WORDS", "28"))
        # Topic cache: entries expire after TTL and the map is bounded
        self.TOPIC_CACHE_TTL_SECONDS: int = int(os.getenv("TOPIC_CACHE_TTL_SECONDS", "900"))
        self.TOPIC_CACHE_MAX_ENTRIES: int = int(os.getenv("TOPIC_CACHE_MAX_ENTRIES", "512"))

        # Recipe providers. First configured wins: Spoonacular, then Edamam, then local dataset.
        self.SPOONACULAR_API_KEY: str = os.getenv("SPOONACULAR_API_KEY", "")
        self.EDAMAM_APP_ID: str = os.getenv("EDAMAM_APP_ID", "")
        self.EDAMAM_APP_KEY: str = os.getenv("EDAMAM_APP_KEY", "")
        # Timeout for provider HTTP calls, in seconds
        self.HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
        # Number of candidates requested from external providers
        self.MAX_RESULTS: int = int(os.getenv("MAX_RESULTS", "30"))

        # Rate limiting: fixed window for every endpoint
        self.RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "60"))
        self.RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "300"))
        # Minimum spacing between generation requests from one client
        self.GENERATION_MIN_INTERVAL_SECONDS: float = float(os.getenv("GENERATION_MIN_INTERVAL_SECONDS", "2"))

        # Terms rejected in free-text hints (case-insensitive substring match)
        self.DENYLIST_TERMS: List[str] = _split_terms(os.getenv("DENYLIST_TERMS", "slur1,slur2"))

        # Server Port
        self.PORT: int = int(os.getenv("PORT", "7777"))

    @property
    def active_provider(self) -> str:
        """Name of the recipe provider selected by the configured credentials."""
        if self.SPOONACULAR_API_KEY:
            return "spoonacular"
        if self.EDAMAM_APP_ID and self.EDAMAM_APP_KEY:
            return "edamam"
        return "local"

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of its allowed range.
        """
        if not (1 <= self.GENERATION_MAX_ATTEMPTS <= 4):
            raise ValueError(
                f"GENERATION_MAX_ATTEMPTS must be between 1 and 4, got: {self.GENERATION_MAX_ATTEMPTS}"
            )
        if self.GENERATION_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"GENERATION_TIMEOUT_SECONDS must be positive, got: {self.GENERATION_TIMEOUT_SECONDS}"
            )
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}")
        if self.TOPIC_MAX_WORDS < 5:
            raise ValueError(f"TOPIC_MAX_WORDS must be at least 5, got: {self.TOPIC_MAX_WORDS}")
        if self.TOPIC_CACHE_TTL_SECONDS < 1:
            raise ValueError(
                f"TOPIC_CACHE_TTL_SECONDS must be at least 1 second, got: {self.TOPIC_CACHE_TTL_SECONDS}"
            )
        if self.TOPIC_CACHE_MAX_ENTRIES < 1:
            raise ValueError(
                f"TOPIC_CACHE_MAX_ENTRIES must be at least 1, got: {self.TOPIC_CACHE_MAX_ENTRIES}"
            )
        if bool(self.EDAMAM_APP_ID) != bool(self.EDAMAM_APP_KEY):
            raise ValueError("EDAMAM_APP_ID and EDAMAM_APP_KEY must be set together")
        if self.HTTP_TIMEOUT_SECONDS <= 0:
            raise ValueError(f"HTTP_TIMEOUT_SECONDS must be positive, got: {self.HTTP_TIMEOUT_SECONDS}")
        if not (1 <= self.MAX_RESULTS <= 100):
            raise ValueError(f"MAX_RESULTS must be between 1 and 100, got: {self.MAX_RESULTS}")
        if self.RATE_LIMIT_MAX_REQUESTS < 1:
            raise ValueError(
                f"RATE_LIMIT_MAX_REQUESTS must be at least 1, got: {self.RATE_LIMIT_MAX_REQUESTS}"
            )
        if self.RATE_LIMIT_WINDOW_SECONDS < 1:
            raise ValueError(
                f"RATE_LIMIT_WINDOW_SECONDS must be at least 1 second, got: {self.RATE_LIMIT_WINDOW_SECONDS}"
            )
        if self.GENERATION_MIN_INTERVAL_SECONDS < 0:
            raise ValueError(
                f"GENERATION_MIN_INTERVAL_SECONDS must not be negative, got: {self.GENERATION_MIN_INTERVAL_SECONDS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
