"""
Speech Collector — FastAPI Entry Point

Speech data collection API: users record sentences from short stories,
administrators review, purge and export the recordings.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from loguru import logger

from app.config import get_settings
from app.routers import admin
from app.routers import recordings
from app.routers import stories
from app.storage import init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup / shutdown lifecycle."""
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")

    # Create missing tables (additive, non-fatal)
    try:
        init_db()
    except Exception as e:
        logger.warning(f"DB init skipped: {e}")

    # Import stories into an empty database
    if settings.auto_setup:
        try:
            from app.maintenance import auto_setup
            auto_setup(settings)
        except Exception as e:
            logger.warning(f"Auto-setup skipped: {e}")

    yield
    logger.info(f"🛑 Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Collects spoken recordings of sentences segmented from Devanagari "
        "short stories. Audio goes to object storage, metadata to the "
        "relational database."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS (open for local dev — restrict in production) ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(stories.router)
app.include_router(recordings.router)
app.include_router(admin.router)


# ── Root health-check ─────────────────────────────────────────────────────
@app.get("/", tags=["Health"])
async def root():
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy"}
