#!/usr/bin/env python3
"""
Wait for the database, run migrations (same process, same DATABASE_URL), then uvicorn.
Ensures tables exist before the app starts.
"""
import os
import sys

# 1) Wait for DB (Postgres only; SQLite needs no wait)
from telus_umrah.core.config import settings

if settings.DATABASE_URL.startswith("postgres"):
    import wait_for_db  # noqa: F401

# 2) Run migrations using the same settings as the app
from alembic.config import Config
from alembic import command

alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

# 3) Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "telus_umrah.main:app", "--host", "0.0.0.0", "--port", os.getenv("PORT", "8000")],
)
