"""
Configuration for the asset tracker client and mock backend.

Settings are read from the environment after loading a .env file from
(in order) the working directory, the repository root, or ~/.hwtrack/.env.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

_env_paths = [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent / ".env",  # repo/.env
    Path.home() / ".hwtrack" / ".env",
]

for _env_path in _env_paths:
    if _env_path.exists():
        load_dotenv(_env_path)
        break
else:
    load_dotenv()


# =============================================================================
# Client Settings
# =============================================================================

BASE_URL = os.getenv("HWTRACK_BASE_URL", "https://assets.example.com").rstrip("/")
API_KEY = os.getenv("HWTRACK_API_KEY", "")
COLLECTION = os.getenv("HWTRACK_COLLECTION", "issues")

# Header carrying the API key; the key may also travel as the "key" query parameter
API_KEY_HEADER = "X-Redmine-API-Key"
API_KEY_PARAM = "key"


# =============================================================================
# Mock Settings
# =============================================================================


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("true", "1", "yes")


def _env_float(name: str, default: float = 0.0) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


MOCK_ENABLED = _env_flag("HWTRACK_MOCK")
MOCK_DATA = os.getenv("HWTRACK_MOCK_DATA", "")
MOCK_DELAY = _env_float("HWTRACK_MOCK_DELAY")

# Page size used by the real service when no limit is given, and its ceiling
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
