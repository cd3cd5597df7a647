"""
Equo Compenso - Main Application Entry Point
FastAPI application: calcolo compensi Tabella C e documenti PDF di conformità.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.config import settings, FEATURES
from app.database import Database
from app.utils.logger import setup_logging, get_logger
from app.middleware.error_handler import add_exception_handlers
from app.routers import calcoli, documenti, profilo

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Features: {FEATURES}")

    await Database.connect_db()
    settings.STORAGE_DIR.mkdir(parents=True, exist_ok=True)

    logger.info("✅ Application startup complete")

    yield

    logger.info("🔄 Shutting down application...")
    await Database.close_db()
    logger.info("✅ Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Add exception handlers
add_exception_handlers(app)


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(calcoli.router, prefix="/api/calcoli", tags=["Calcoli Compenso"])
app.include_router(documenti.router, prefix="/api/documenti", tags=["Documenti"])
app.include_router(profilo.router, prefix="/api/me", tags=["Profilo"])


# =============================================================================
# HEALTH CHECK ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "online",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
@app.get("/api/health")
async def health_check():
    """Detailed health check endpoint."""
    db_status = "connected" if Database.db is not None else "disconnected"

    return {
        "status": "healthy",
        "database": db_status,
        "version": settings.APP_VERSION
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD
    )
