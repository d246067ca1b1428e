from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "TextScan AI"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./local.db"

    # ── Cache ───────────────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    LLM_CACHE_TTL_SECONDS: int = 60 * 60 * 24 * 3  # 3 days

    # ── LLM providers ───────────────────────────
    OPENAI_API_KEY: Optional[str] = None
    GOOGLE_GEMINI_API_KEY: Optional[str] = None

    GENERATOR_MODEL: str = "gpt-4o"
    VALIDATOR_MODEL: str = "gpt-4o"
    SCAN_SEVERITIES: List[str] = ["critical", "important", "minor"]

    # USD per token, used for the cost estimate in debugging info only
    COST_PER_INPUT_TOKEN: float = 2.5 / 1_000_000
    COST_PER_OUTPUT_TOKEN: float = 10 / 1_000_000

    # ── Browser ─────────────────────────────────
    CHROMEDRIVER_PATH: Optional[str] = None
    NAVIGATION_TIMEOUT_SECONDS: int = 30
    NETWORK_IDLE_MS: int = 500
    BROWSER_WINDOW_WIDTH: int = 1920
    BROWSER_WINDOW_HEIGHT: int = 1080
    BROWSER_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/69.0.3497.100 Safari/537.36"
    )

    # ── Screenshots ─────────────────────────────
    SCREENSHOT_DIR: str = "local_user_data/screenshots"
    SCREENSHOT_PADDING: int = 100
    SCREENSHOT_CACHE_SECONDS: int = 60 * 60 * 24 * 365  # 1 year, files never change

    # ── Superuser ───────────────────────────────
    SUPERUSER_TOKEN: Optional[str] = None

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
