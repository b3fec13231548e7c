import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./marketplace.db")

# Firebase Configuration (auth + push notifications)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL")
FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY")
if FIREBASE_PRIVATE_KEY and "\\n" in FIREBASE_PRIVATE_KEY:
    FIREBASE_PRIVATE_KEY = FIREBASE_PRIVATE_KEY.replace("\\n", "\n")

# Cash closure cron
CLOSURE_DUE_WINDOW_HOURS = 25  # Fixed; independent of the activation offset
CLOSURE_FIRST_RUN_DELAY_SECONDS = 30
MIN_CLOSURE_CRON_INTERVAL_MS = 60_000

CLOSURE_ACTIVATE_OFFSET_MIN = _int_env("CLOSURE_ACTIVATE_OFFSET_MIN", 60)
CLOSURE_CRON_INTERVAL_MS = max(
    MIN_CLOSURE_CRON_INTERVAL_MS, _int_env("CLOSURE_CRON_INTERVAL_MS", 300_000)
)
# "api" runs the cycle inside the web process, "worker" inside the ARQ worker, "off" disables it
CLOSURE_CRON_RUNNER = os.getenv("CLOSURE_CRON_RUNNER", "api").lower()

# Default currency for cash settlements
CASH_CURRENCY = "CLP"
