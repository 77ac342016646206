"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from party_sheets.config import get_settings
from party_sheets.middleware.error_handler import setup_error_handlers

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("party_sheets")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown."""
    # Startup: Initialize database
    from party_sheets.database.engine import init_db
    try:
        await init_db()
        logger.info("[Startup] Database initialized")
    except Exception as e:
        # The character store falls back to the local file while the database is down
        logger.warning(f"[Startup] Database unavailable, using local character file: {e}")

    yield  # Application runs here

    # Shutdown: Close database connections
    from party_sheets.database.engine import close_db
    await close_db()
    logger.info("[Shutdown] Database connections closed")


app = FastAPI(
    title="Party Sheets",
    description="Import and view Foundry VTT D&D 5e character sheets for a whole party",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.debug(f"[REQUEST] {request.method} {request.url.path} -> {response.status_code}")
    return response

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Structured error responses
setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "service": "Party Sheets", "version": "0.1.0"}


@app.get("/health")
async def health_check():
    """Detailed health check. The API stays usable on the local file when the database is down."""
    from party_sheets.database.engine import ping_database
    database_ok = await ping_database()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable",
        "debug_mode": settings.DEBUG
    }


# Routes
from party_sheets.api.routes import characters, inventory  # noqa: E402
app.include_router(characters.router, prefix="/api/characters", tags=["characters"])
app.include_router(inventory.router, prefix="/api", tags=["inventory"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("party_sheets.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
