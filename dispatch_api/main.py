# dispatch_api/main.py
import logging
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from dispatch_api.config.settings import settings
from dispatch_api.config.database import engine, init_db, check_database
from dispatch_api.core.logging_config import setup_logging
from dispatch_api.core.middleware import setup_middleware
from dispatch_api.core.exceptions import setup_exception_handlers
from dispatch_api.api.v1.router import api_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.log_level)
    logger.info("🚀 Dispatch API Starting...")
    logger.info(f"📍 Version: {settings.version}")
    logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(f"🗄️  Database: {settings.database_host}")

    init_db()

    yield

    # Shutdown
    logger.info("🛑 Dispatch API Shutting down...")
    engine.dispose()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Órdenes de entrega: cálculo de distancia, asignación única y listado",
    docs_url="/docs",
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)
setup_exception_handlers(app)

# Include routers
app.include_router(api_router, prefix=settings.api_prefix)

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "🚀 Dispatch API - Órdenes de entrega",
        "version": settings.version,
        "status": "running",
        "environment": "production" if not settings.debug else "development",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    database_ok = check_database()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "unhealthy",
            "version": settings.version,
            "app": settings.app_name,
            "database": "up" if database_ok else "down"
        }
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dispatch_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
