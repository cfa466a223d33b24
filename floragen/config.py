import os
from logging import INFO, StreamHandler, basicConfig, getLevelName, getLogger, handlers
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or None
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
DB_URL = os.getenv("DB_URL", "sqlite:///./floragen.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "floragen.log")


def set_logger(level: str = LOG_LEVEL, log_file: str = LOG_FILE):
    level_value = getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = INFO

    log_handlers = [StreamHandler()]
    if log_file:
        log_handlers.append(
            handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
        )

    basicConfig(
        level=level_value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=log_handlers,
    )


def check_api_key(api_key: Optional[str]) -> bool:
    """Report whether a Gemini key is configured, warning when its shape looks wrong.

    Google AI keys usually start with "AIza" and are 39 characters long. A key
    with another shape is still used.
    """
    if not api_key:
        logger.warning(
            "GEMINI_API_KEY is not configured; AI-derived fields will fall back to their defaults."
        )
        return False
    if not api_key.startswith("AIza") or len(api_key) != 39:
        logger.warning(
            f"GEMINI_API_KEY does not look like a Google AI key (length {len(api_key)}). Check the value."
        )
    return True


logger = getLogger(__name__)
