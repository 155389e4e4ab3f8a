"""Rate limits for the administrative API."""

import os

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

DEFAULT_LIMITS = ["200 per hour", "50 per minute"]

# Catalog writes publish broker messages, so they get a tighter budget
ADMIN_WRITE_LIMIT = os.getenv("ADMIN_WRITE_RATE_LIMIT", "30 per minute")

# Bound by create_app; disabled there when RATE_LIMIT_ENABLED=0
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=DEFAULT_LIMITS,
    storage_uri=os.getenv("LIMITER_STORAGE_URI", "memory://"),
)
