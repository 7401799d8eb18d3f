# config.py
# Centralized settings, read from the environment (and a local .env file).
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///teematch.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Seed the default course catalog on startup when the table is empty
SEED_COURSES = os.getenv("SEED_COURSES", "true").lower() in ("1", "true", "yes")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
