"""
Daily pipeline entry point for an external cron

Usage:
    python -m app.cron
"""
import asyncio
import sys

from app.database import db_manager
from app.logging_config import logger, setup_logging
from app.services.scheduler import scheduler


async def run_once() -> int:
    """Run the pipeline once and return a process exit code"""
    try:
        result = await scheduler.run_pipeline()
    except Exception as e:
        logger.error(f"Pipeline failed with critical error: {str(e)}")
        return 1
    finally:
        await db_manager.close()

    if result is None:
        return 1

    logger.info(f"Pipeline completed successfully, stored {len(result.ideas)} ideas")
    if result.ideas:
        logger.info(f"Top idea: {result.ideas[0].name} ({result.ideas[0].success_probability}% success)")
    for error in result.errors:
        logger.warning(f"Non-critical error: {error}")
    return 0


def main():
    setup_logging()
    sys.exit(asyncio.run(run_once()))


if __name__ == "__main__":
    main()
