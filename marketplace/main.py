import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

# Import models to ensure they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import CLOSURE_CRON_RUNNER
from .database import Base, engine
from .domain.cash.router import router as cash_router
from .domain.closure.router import router as closure_router
from .routes.notifications import router as notifications_router
from .services.closure_cron import setup_closure_cron, stop_closure_cron

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    if CLOSURE_CRON_RUNNER == "api":
        setup_closure_cron()
    else:
        logger.info(f"In-process closure cron disabled (CLOSURE_CRON_RUNNER={CLOSURE_CRON_RUNNER})")

    yield

    await stop_closure_cron()
    logger.info("Application shutting down...")


app = FastAPI(title="Marketplace API", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    if duration > 1.0:
        logger.warning(
            f"🐌 Slow request: {request.method} {request.url.path} took {duration:.2f}s"
        )
    return response


app.include_router(closure_router)
app.include_router(cash_router)
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "Marketplace API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
