"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Must run before importing modules that read env vars at import time
# (session secret, OTP lifetime, password policy)
load_dotenv()

# main.py is at <root>/src/api/main.py; src is two levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from api.errors import register_exception_handlers
from api.routes import account, auth, health
from adapter.external.resend_email import init_resend
from adapter.mongodb import DATABASE_NAME
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.indexes import ensure_all_indexes
from utils.logging import setup_structured_logging

setup_structured_logging()

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Recipe Portal API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    client = get_mongodb_client()
    if client:
        if ensure_all_indexes(client[DATABASE_NAME]):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    init_resend()

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="Accounts, sign-in and favorites for the recipe portal",
    version=VERSION,
    lifespan=lifespan,
)

def _cors_settings(raw: str) -> tuple[list[str], bool]:
    """Parse CORS_ORIGINS into (origins, allow_credentials).

    Browsers reject credentialed requests against "*", so credentials are
    only enabled for an explicit origin list.
    """
    if raw.strip() == "*":
        logger.warning(
            "CORS allows any origin; set CORS_ORIGINS to the frontend URL(s) in production"
        )
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    logger.info("CORS restricted to configured origins", extra={"origins": origins})
    return origins, True


cors_origins, allow_credentials = _cors_settings(os.getenv("CORS_ORIGINS", "*"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(account.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 5001))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False  # structured application logs already cover requests
    )
