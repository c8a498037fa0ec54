import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Any SQLAlchemy URL; the hosted Postgres instance in production
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dst_booking.db")

# Marketplace listing defaults
MARKETPLACE_PAGE_SIZE = int(os.getenv("MARKETPLACE_PAGE_SIZE", "50"))
MARKETPLACE_MAX_PAGE_SIZE = int(os.getenv("MARKETPLACE_MAX_PAGE_SIZE", "200"))

# Staffing defaults applied to new session requests
DEFAULT_MIN_OPERATORS = int(os.getenv("DEFAULT_MIN_OPERATORS", "1"))
DEFAULT_PREFERRED_OPERATORS = int(os.getenv("DEFAULT_PREFERRED_OPERATORS", "1"))

# Frontend base URL, also the default CORS origin
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"{FRONTEND_URL},http://localhost:3000",
).split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
