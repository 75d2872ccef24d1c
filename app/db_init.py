"""
Database initialization utilities
"""
import asyncio
from app.database import db_manager
from app.logging_config import logger, setup_logging


async def init_database():
    """Initialize database and create all tables"""
    try:
        logger.info("Initializing database...")
        await db_manager.initialize()
        logger.info("Database initialization completed successfully")

    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise
    finally:
        await db_manager.close()


async def check_database_health() -> bool:
    """Check database connectivity"""
    try:
        logger.info("Checking database health...")
        is_healthy = await db_manager.health_check()

        if is_healthy:
            logger.info("Database health check passed")
        else:
            logger.error("Database health check failed")

        return is_healthy

    finally:
        await db_manager.close()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
