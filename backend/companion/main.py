import logging
from typing import Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .calendar_routes import router as calendar_router
from .config import Settings, get_settings
from .learning_routes import router as learning_router
from .logging_config import configure_logging
from .watch_routes import router as watch_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Learning Companion Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(watch_router)
app.include_router(calendar_router)
app.include_router(learning_router)

settings_snapshot = get_settings()
logger.info("YouTube API key configured: %s", bool(settings_snapshot.youtube_api_key))
logger.info("Gemini API key configured: %s (model=%s)", bool(settings_snapshot.gemini_api_key), settings_snapshot.gemini_model)


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, object]:
    return {
        "status": "ok",
        "youtube_configured": bool(settings.youtube_api_key),
        "gemini_configured": bool(settings.gemini_api_key),
    }
