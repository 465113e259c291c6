from functools import lru_cache
from typing import List, Optional
import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    host_password: Optional[str] = None

    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 60.0

    marketing_stats_path: str = "marketing_stats.csv"

    starting_budget: float = 10_000_000
    starting_satisfaction: float = 50

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    port: int = 5050

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    設定 root logger

    只在 main.py 啟動時呼叫一次；各模組只透過 logging.getLogger(__name__) 取得 logger
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.debug(f"Logging configured at level {settings.log_level}")
