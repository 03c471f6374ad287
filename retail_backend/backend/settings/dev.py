# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
- SQLite unless DATABASE_URL says otherwise
- Posting can be switched off to run stock/settlement flows without a chart
- Verbose app logging
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:5173"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:5173"])
CORS_ALLOW_CREDENTIALS = True

ACCOUNTING_POSTING_ENABLED = env.bool("ACCOUNTING_POSTING_ENABLED", default=True)

for _app in ("accounting", "products", "sales"):
    LOGGING["loggers"][_app]["level"] = "DEBUG"
