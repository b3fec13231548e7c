import logging
import os
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

SLOW_QUERY_LOGGING = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_SECONDS = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))


def _server_pool_options() -> dict:
    """Pool sizing for Postgres/MySQL; read from DB_POOL_* env vars"""
    return {
        "pool_pre_ping": True,
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "300")),
        "pool_size": int(os.getenv("DB_POOL_SIZE", "20")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "30")),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
    }


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # The closure cron ticks in a worker thread
        db_engine = create_engine(url, connect_args={"check_same_thread": False})
        logger.info("✅ SQLite engine ready")
        return db_engine

    options = _server_pool_options()
    db_engine = create_engine(url, **options)
    logger.info(
        f"✅ Database engine ready (pool_size={options['pool_size']}, max_overflow={options['max_overflow']})"
    )
    return db_engine


def log_slow_queries(db_engine: Engine, threshold: float = SLOW_QUERY_SECONDS) -> None:
    @event.listens_for(db_engine, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(db_engine, "after_cursor_execute")
    def _check_elapsed(conn, _cursor, statement, _parameters, _context, _executemany):
        elapsed = time.time() - conn.info["query_start_time"].pop(-1)
        if elapsed > threshold:
            logger.warning(f"🐌 Slow query ({elapsed:.2f}s): {statement[:200]}...")


try:
    engine = build_engine(DATABASE_URL)
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise

if SLOW_QUERY_LOGGING:
    log_slow_queries(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
