"""
API routes for pipeline operations
"""
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from app.database import get_db
from app.models import IdeaRun, PipelineError
from app.services.scheduler import scheduler
from app.logging_config import logger

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


@router.post("/run")
async def run_pipeline(background_tasks: BackgroundTasks):
    """Manually trigger a pipeline run"""
    if scheduler.is_running:
        return {
            "message": "Pipeline already in progress",
            "status": "running"
        }

    background_tasks.add_task(scheduler.run_scheduled_pipeline)

    return {
        "message": "Pipeline started in background",
        "status": "started"
    }


@router.get("/status")
async def get_pipeline_status(db: AsyncSession = Depends(get_db)):
    """Get current pipeline status and the latest run"""
    try:
        result = await db.execute(
            select(IdeaRun).order_by(IdeaRun.created_at.desc()).limit(1)
        )
        latest_run = result.scalars().first()

        return {
            "scheduler": scheduler.get_status(),
            "latest_run": latest_run.model_dump() if latest_run else None
        }

    except Exception as e:
        logger.error(f"Error getting pipeline status: {str(e)}")
        raise HTTPException(status_code=500, detail="Error getting status")


@router.get("/runs")
async def get_runs(
    limit: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db)
):
    """List recent pipeline runs"""
    try:
        result = await db.execute(
            select(IdeaRun).order_by(IdeaRun.created_at.desc()).limit(limit)
        )
        runs = [run.model_dump() for run in result.scalars().all()]
        return {"runs": runs, "total": len(runs)}

    except Exception as e:
        logger.error(f"Error fetching runs: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching runs")


@router.get("/runs/{run_id}/errors")
async def get_run_errors(run_id: str, db: AsyncSession = Depends(get_db)):
    """List errors recorded during a pipeline run"""
    try:
        result = await db.execute(
            select(PipelineError)
            .where(PipelineError.run_id == run_id)
            .order_by(PipelineError.occurred_at)
        )
        errors = [error.model_dump() for error in result.scalars().all()]
        return {"errors": errors, "total": len(errors)}

    except Exception as e:
        logger.error(f"Error fetching errors for run {run_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching run errors")
