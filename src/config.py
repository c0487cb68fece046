import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Charge le .env situé à la racine du projet, où que soit lancé Python
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")


class Settings(BaseModel):
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SERDER_DATA_DIR: str = os.getenv("SERDER_DATA_DIR", "")
    SERDER_CODEC: str = os.getenv("SERDER_CODEC", "json")
    SERDER_ATOMIC_WRITES: bool = os.getenv("SERDER_ATOMIC_WRITES", "true").lower() in ("1", "true", "yes")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the ``src`` logger tree at LOG_LEVEL."""
    logger = logging.getLogger("src")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        logger.addHandler(handler)
