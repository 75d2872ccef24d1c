"""
Scheduling service for the daily idea pipeline
"""
from datetime import datetime
from typing import Optional
from app.database import db_manager
from app.logging_config import logger
from app.services.pipeline import IdeaPipeline, PipelineResult


class SchedulerService:
    """Runs the pipeline with a single-flight guard"""

    def __init__(self, pipeline_factory=IdeaPipeline):
        self.pipeline_factory = pipeline_factory
        self.is_running = False
        self.last_run: Optional[datetime] = None
        self.last_stats: Optional[dict] = None
        self.last_error: Optional[str] = None

    async def run_pipeline(self) -> Optional[PipelineResult]:
        """
        Run the pipeline once

        Returns:
            PipelineResult, or None when a run is already in progress

        Raises:
            Exception: Any pipeline failure, after it has been recorded
        """
        if self.is_running:
            logger.warning("Pipeline already in progress, skipping run")
            return None

        self.is_running = True
        self.last_run = datetime.utcnow()
        self.last_error = None

        try:
            logger.info("Starting pipeline run")
            async with db_manager.get_session() as db:
                result = await self.pipeline_factory().run(db)
            self.last_stats = result.stats
            return result

        except Exception as e:
            self.last_error = str(e)
            raise
        finally:
            self.is_running = False

    async def run_scheduled_pipeline(self):
        """Background entry point: failures are logged and recorded, not raised"""
        try:
            await self.run_pipeline()
        except Exception as e:
            logger.error(f"Scheduled pipeline run failed: {str(e)}")

    def get_status(self) -> dict:
        """Get current scheduler status"""
        return {
            "is_running": self.is_running,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_stats": self.last_stats,
            "last_error": self.last_error
        }


# Global scheduler instance
scheduler = SchedulerService()
