"""Central configuration for MediFast."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base directory (root of the project)
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

load_dotenv(BASE_DIR / ".env")


def _flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Paths
DATA_DIR = Path(os.getenv("MEDIFAST_DATA_DIR", str(Path.home() / ".medifast")))
DB_PATH = Path(os.getenv("MEDIFAST_DB_PATH", str(DATA_DIR / "medifast.db")))
LOG_DIR = Path(os.getenv("MEDIFAST_LOG_DIR", str(DATA_DIR / "logs")))

# Logging
LOG_LEVEL = os.getenv("MEDIFAST_LOG_LEVEL", "INFO").upper()
CONSOLE_LOGGING = _flag("MEDIFAST_CONSOLE_LOG", default=False)

# Session behaviour
TEST_MODE = _flag("MEDIFAST_TEST_MODE")  # plan minutes are read as seconds
AUDIO_ENABLED = _flag("MEDIFAST_AUDIO", default=True)
TICK_INTERVAL_SECONDS = 1.0
HISTORY_LIMIT = 500
