"""
Bagshare Configuration
======================
Environment-driven settings. Every value has a development default so the
API can boot without any configuration (in-memory store, unsigned SMS).
"""

import os
from typing import List

# ============================================
# Storage
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL", "")

# ============================================
# Authentication
# ============================================
DEV_TOKEN_SECRET = "bagshare-dev-secret"
AUTH_TOKEN_SECRET = os.getenv("AUTH_TOKEN_SECRET", DEV_TOKEN_SECRET)
AUTH_TOKEN_TTL_HOURS = int(os.getenv("AUTH_TOKEN_TTL_HOURS", "168"))

# ============================================
# Matching rules
# ============================================
# Lead time between listing and departure, used by both matching paths
MATCH_LEAD_TIME_HOURS = int(os.getenv("MATCH_LEAD_TIME_HOURS", "24"))

# ============================================
# SMS (Twilio)
# ============================================
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")
TWILIO_API_BASE_URL = os.getenv("TWILIO_API_BASE_URL", "https://api.twilio.com/2010-04-01")

# ============================================
# HTTP
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def cors_allow_origins() -> List[str]:
    """Parse CORS_ALLOW_ORIGINS (comma-separated)."""
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
