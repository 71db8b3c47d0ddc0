import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Settings:
    database_url: Optional[str]
    force: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment, loading a .env file first if present"""
    load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        force=os.getenv("QUEUER_SQL_FORCE", "").strip().lower() in TRUE_VALUES,
        log_level=os.getenv("QUEUER_SQL_LOG_LEVEL", "INFO").upper(),
    )
