"""
FastAPI application entry point for Idea Factory
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.database import db_manager
from app.logging_config import setup_logging
from app.routes import build_plan, ideas, pipeline, web


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Idea Factory starting up")
    await db_manager.initialize()

    yield

    # Shutdown
    await db_manager.close()
    logger.info("Idea Factory shutting down")


app = FastAPI(
    title="Idea Factory",
    description="Generate, validate and rank product ideas daily",
    version="1.0.0",
    lifespan=lifespan
)

settings = get_settings()

app.include_router(ideas.router)
app.include_router(build_plan.router)
app.include_router(pipeline.router)
app.include_router(web.router)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "Idea Factory is running", "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    database_ok = await db_manager.health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "idea-factory",
        "database": database_ok
    }
