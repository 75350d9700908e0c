import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# FineTune persistence API (customers, equipment, work orders, agreements)
FINETUNE_API_URL = os.getenv("FINETUNE_API_URL", "http://localhost:8080")
FINETUNE_API_TOKEN = os.getenv("FINETUNE_API_TOKEN")
FINETUNE_SHOP_ID = os.getenv("FINETUNE_SHOP_ID", "1")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# Customer live search
SEARCH_DEBOUNCE_MS = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
SEARCH_MIN_CHARS = int(os.getenv("SEARCH_MIN_CHARS", "2"))

# Agreement gating
# Distance (in scroll units) from the end of the agreement text that still counts as "read"
SCROLL_TOLERANCE = int(os.getenv("SCROLL_TOLERANCE", "10"))
AGREEMENT_VERSION = os.getenv("AGREEMENT_VERSION", "v1")
AGREEMENT_DRAFT_TTL = int(os.getenv("AGREEMENT_DRAFT_TTL", "3600"))  # 1 hour

# Signature pad raster size (pixels)
SIGNATURE_WIDTH = int(os.getenv("SIGNATURE_WIDTH", "600"))
SIGNATURE_HEIGHT = int(os.getenv("SIGNATURE_HEIGHT", "150"))

# Wizard sessions are dropped after this much inactivity
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "7200"))

# Redis (agreement draft cache)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
REDIS_CONNECT_TIMEOUT = float(os.getenv("REDIS_CONNECT_TIMEOUT", "1"))
# How long to stop trying Redis after a failed connection
REDIS_RETRY_SECONDS = float(os.getenv("REDIS_RETRY_SECONDS", "30"))
