"""FastAPI backend for the learning-materials retry pipeline."""

import logging

from fastapi import FastAPI
from pydantic import BaseModel

from lmg import __version__
from lmg.config import get_settings

settings = get_settings()

logger = logging.getLogger(__name__)
logging.basicConfig(level=getattr(logging, settings.lmg_log_level.upper(), logging.INFO))

app = FastAPI(
    title="LMG API",
    description="Retry and chunked generation of video learning materials.",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

logger.info(
    "Storage: %s (data dir %s)",
    "Postgres" if settings.lmg_database_url else "JSON files",
    settings.data_dir,
)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    data_dir: str


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", data_dir=str(settings.data_dir))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
from backend.routes import retry  # noqa: E402

app.include_router(retry.router, prefix="/api", tags=["retry"])
