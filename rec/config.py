"""
Runtime configuration.
Values come from the environment (or a .env file) with local defaults.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Codeforces handle whose practice state is tracked
DEFAULT_HANDLE = os.getenv("REC_HANDLE", "")

# Directory holding cached API responses and the excluded list
DATA_DIR = os.getenv("REC_DATA_DIR", os.path.join(".", "data"))

# Recommender state database - defaults to SQLite if DATABASE_URL not set
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rec.db")

CODEFORCES_API_BASE = os.getenv("CODEFORCES_API_BASE", "https://codeforces.com/api")

# Delay between API requests (in seconds), Codeforces allows ~1 call per 2s
REQUEST_DELAY = float(os.getenv("REC_REQUEST_DELAY", "2.0"))

LOG_LEVEL = os.getenv("REC_LOG_LEVEL", "WARNING")


def excluded_path(data_dir: str = None) -> str:
    """Path of the user-curated excluded problems list."""
    return os.path.join(data_dir or DATA_DIR, "excluded.json")
