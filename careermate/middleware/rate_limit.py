"""
Per-IP rate limits (slowapi).

A single Limiter instance is shared by main.py (app.state.limiter and the
429 handler) and the route decorators.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from careermate.config import get_settings

# Requests per window
AI_LIMIT = "100 per 15 minutes"
REGISTER_LIMIT = "5/hour"
LOGIN_LIMIT = "20/minute"

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)
