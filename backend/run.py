"""Run FastAPI backend server."""

import os

import uvicorn

from lmg.config import Settings

if __name__ == "__main__":
    settings = Settings()
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=os.environ.get("LMG_ENV", "development") == "development",
    )
