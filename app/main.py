"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.database import init_db
from app.api.voice import router as voice_router

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    logger.info(f"Starting up {settings.app_name}...")
    logger.info(f"APP_ENV={settings.app_env} (is_prod={settings.is_prod})")

    # Prod: require Gemini API key (fail fast)
    if settings.is_prod and not settings.gemini_api_key:
        raise RuntimeError("GEMINI_API_KEY is required when APP_ENV=prod. Set it in .env or environment.")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set. Intent extraction falls back to keyword rules and TTS will fail.")
    else:
        logger.info(f"LLM: Gemini (model: {settings.llm_model}), TTS: Gemini (model: {settings.tts_model})")

    logger.info(
        f"STT: faster-whisper (model: {settings.stt_model_size}, primary: {settings.stt_primary_language}, "
        f"candidates: {settings.stt_candidate_languages})"
    )

    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    if settings.cache_enabled:
        from app.services.cache import redis_available
        if redis_available:
            logger.info("Cache enabled (Redis available)")
        else:
            logger.warning("Cache enabled but Redis not available, continuing without cache")
    else:
        logger.info("Cache disabled (CACHE_ENABLED=false)")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down...")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "service": settings.app_name
    }


# Include API routers
app.include_router(voice_router, prefix="/api/v1/voice", tags=["Voice"])


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler - never expose stack traces."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred. Please try again later."}
    )
