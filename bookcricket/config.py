"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Storage for finalized match scores
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "book_cricket.db")

    # Extra CORS origins (comma-separated)
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Overs range offered to players; the engine itself only needs >= 1
    MIN_OVERS: int = 1
    MAX_OVERS: int = 20

    # Quick match: slider 1-10, one wicket
    QUICK_MAX_OVERS: int = 10
    QUICK_DEFAULT_OVERS: int = 2
    QUICK_WICKETS: int = 1

    # Long match: fixed presets, ten wickets
    LONG_OVER_PRESETS: tuple = (5, 10, 15, 20)
    LONG_DEFAULT_OVERS: int = 5
    LONG_WICKETS: int = 10


settings = Settings()
