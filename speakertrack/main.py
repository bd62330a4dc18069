"""
FastAPI application entry point for speakertrack.

speakertrack finds the active speaker in a video from per-frame face
detections and face mesh landmarks, and signals when the camera should cut
to a new speaker.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from speakertrack.config import get_settings
from speakertrack.routers import health, speakers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up shared state on startup and release it on shutdown."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting {settings.app_name}...")

    # Limits how many tracking requests run simultaneously
    app.state.job_semaphore = asyncio.Semaphore(settings.max_concurrent_jobs)
    logger.info(f"Max concurrent jobs: {settings.max_concurrent_jobs}")

    defaults = settings.get_lip_track_options()
    logger.info(
        f"Tracker defaults: min_speaker_span={defaults.min_speaker_span}ms, "
        f"iou_threshold={defaults.iou_threshold}, "
        f"variance_history={defaults.variance_history}, "
        f"mean_history={defaults.mean_history}, "
        f"min_shot_span={defaults.min_shot_span}s"
    )

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    app.state.job_semaphore = None
    logger.info("Shutdown complete")


app = FastAPI(
    title="speakertrack",
    description="""
Active speaker tracking from face mesh landmarks.

## Usage

`POST /speakers/track` with the frame size and, for every frame, the face
boxes and their 468-point face mesh landmarks. The response holds one
speaker box (or none) per frame and a speaker change signal per scene.
    """,
    version=health.VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(speakers.router, prefix="/speakers", tags=["Speakers"])


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    settings = get_settings()
    return {
        "service": settings.app_name,
        "version": health.VERSION,
        "status": "running",
        "docs": "/docs",
    }
