import os, time
from urllib.parse import urlparse

import psycopg2
import structlog

from telus_umrah.core.logging_config import configure_logging

configure_logging()
log = structlog.get_logger("wait_for_db")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")

# SQLAlchemy URL may start with postgresql+psycopg2://
url = DATABASE_URL.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
p = urlparse(url)

host = p.hostname or "db"
port = p.port or 5432
user = p.username or "telus_umrah"
password = p.password or "telus_umrah"
dbname = (p.path or "/telus_umrah").lstrip("/") or "telus_umrah"

timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
start = time.time()

log.info("db.waiting", host=host, port=port, dbname=dbname, user=user, timeout_s=timeout_s)
while True:
    try:
        conn = psycopg2.connect(host=host, port=port, user=user, password=password, dbname=dbname)
        conn.close()
        log.info("db.ready", host=host, port=port)
        break
    except psycopg2.OperationalError as e:
        if time.time() - start > timeout_s:
            log.error("db.wait_timeout", error=str(e))
            raise
        time.sleep(1)
