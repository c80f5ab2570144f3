from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./tipping.db"
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MIN: int = 1440

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Result feed settings (import, kickoff, final score)
    RESULT_FEED_KEY: Optional[str] = None

    # Scoring settings
    POINTS_EXACT_SCORE: int = 3
    POINTS_CORRECT_OUTCOME: int = 1
    # Upper bound for any goal value, predicted or final
    MAX_GOALS: int = 99

    RECENT_PREDICTIONS_LIMIT: int = 5
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
