# bidprice/settings.py
"""Environment-driven settings.

Values are read once at import time from the process environment (and a
local ``.env`` file when present).
"""
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or "sqlite:///./bid_prices.db"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# "listing_id" skips rows already stored, "file_hash" rejects re-uploaded files
DEDUP_POLICY = os.getenv("DEDUP_POLICY", "listing_id").strip().lower()
INSERT_BATCH_SIZE = int(os.getenv("INSERT_BATCH_SIZE", "100"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "50"))

PLATFORM_NAME = "Carsome"
