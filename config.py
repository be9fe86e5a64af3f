import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent
env_path = ROOT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

# MongoDB
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "cargo_tracker")

# Route geometry provider (OSRM). Unset disables detailed geometry.
OSRM_URL = os.getenv("OSRM_URL") or None
OSRM_TIMEOUT = float(os.getenv("OSRM_TIMEOUT", "5.0"))

# API server
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "5001"))
