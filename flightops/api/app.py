"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env file from project root (must be before other imports)
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from flightops.api.routes import compliance, crew, fleet, schedule  # noqa: E402
from flightops.contracts.settings import FeatureSettings  # noqa: E402
from flightops.services.sessions import SessionRegistry  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize Firebase Admin and the in-process session registry."""
    # Initialize Firebase Admin SDK (uses ADC on Cloud Run)
    try:
        import firebase_admin
        firebase_admin.initialize_app()
        logger.info("Firebase Admin SDK initialized")
    except ValueError:
        # Already initialized
        logger.info("Firebase Admin SDK already initialized")
    except Exception as exc:
        logger.warning("Firebase Admin SDK init failed: %s", exc)

    app.state.feature_settings = FeatureSettings.from_env()
    idle_minutes = float(os.environ.get("FLIGHTOPS_SESSION_IDLE_MINUTES", "120"))
    app.state.sessions = SessionRegistry(idle_timeout=idle_minutes * 60)
    logger.info("Feature settings: %s", app.state.feature_settings.model_dump())
    yield


app = FastAPI(
    title="FlightOps Scheduling API",
    description="Flight schedule editing, sync and crew compliance",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedule.router, prefix="/api")
app.include_router(compliance.router, prefix="/api")
app.include_router(fleet.router, prefix="/api")
app.include_router(crew.router, prefix="/api")


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "open_sessions": len(app.state.sessions),
    }
