import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./college_predictor.db")

    # AI strategy
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    AI_PREDICTIONS_ENABLED: bool = _env_flag("AI_PREDICTIONS_ENABLED")

    # Engine calibration
    INCLUDE_REACH_TIER: bool = _env_flag("INCLUDE_REACH_TIER")
    MAX_WORKERS: int = int(os.getenv("MAX_WORKERS", "4"))
    SWEEP_DEADLINE_SECONDS: float = float(os.getenv("SWEEP_DEADLINE_SECONDS", "10"))

    # Server
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # CORS
    ALLOWED_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
        if origin.strip()
    ]


settings = Settings()
