"""
API routes for ideas management
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select
from app.database import get_db
from app.models import Idea, Platform
from app.services.export_service import ExportService
from app.services.ranking import filter_valid_ideas, rank_ideas
from app.logging_config import logger

router = APIRouter(prefix="/ideas", tags=["ideas"])

HIGH_CONFIDENCE_THRESHOLD = 80


class IdeaUpdate(SQLModel):
    chosen: Optional[bool] = None
    built: Optional[bool] = None
    sold: Optional[bool] = None


def summarize_ideas(ideas: List[Idea]) -> dict:
    """Dashboard summary figures for a set of ideas"""
    total = len(ideas)
    if total:
        avg_success = round(sum(idea.success_probability for idea in ideas) / total)
    else:
        avg_success = 0

    return {
        "total_ideas": total,
        "pipeline_value_usd": sum(idea.estimated_revenue_high_usd or 0 for idea in ideas),
        "average_success_probability": avg_success,
        "high_confidence_count": sum(
            1 for idea in ideas if idea.success_probability >= HIGH_CONFIDENCE_THRESHOLD
        ),
        "chosen_count": sum(1 for idea in ideas if idea.chosen)
    }


async def load_ideas(db: AsyncSession, run_id: Optional[str] = None) -> List[Idea]:
    query = select(Idea)
    if run_id:
        query = query.where(Idea.run_id == run_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def load_ranked_ideas(db: AsyncSession, run_id: Optional[str] = None, apply_filter: bool = False):
    ideas = await load_ideas(db, run_id)
    if apply_filter:
        ideas = filter_valid_ideas(ideas)
    return rank_ideas(ideas)


@router.get("/")
async def get_ideas(
    limit: int = Query(50, ge=1, le=500),
    sort_by: str = Query(
        "created_at",
        pattern="^(created_at|success_probability|monthly_search_volume|estimated_revenue_high_usd)$"
    ),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    platform: Optional[Platform] = Query(None),
    chosen: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Get ideas with filtering and sorting"""
    try:
        query = select(Idea)

        if platform is not None:
            query = query.where(Idea.platform == platform.value)

        if chosen is not None:
            query = query.where(Idea.chosen == chosen)

        column = getattr(Idea, sort_by)
        query = query.order_by(column.desc() if order == "desc" else column.asc())
        query = query.limit(limit)

        result = await db.execute(query)
        ideas = [idea.model_dump() for idea in result.scalars().all()]

        return {
            "ideas": ideas,
            "limit": limit,
            "total": len(ideas)
        }

    except Exception as e:
        logger.error(f"Error fetching ideas: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching ideas")


@router.get("/ranked")
async def get_ranked_ideas(
    run_id: Optional[str] = Query(None),
    apply_filter: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    """Rank stored ideas by composite score"""
    try:
        ranked = await load_ranked_ideas(db, run_id, apply_filter)
        return {
            "ideas": [idea.model_dump() for idea in ranked],
            "total": len(ranked)
        }

    except Exception as e:
        logger.error(f"Error ranking ideas: {str(e)}")
        raise HTTPException(status_code=500, detail="Error ranking ideas")


@router.get("/stats/summary")
async def get_ideas_stats(db: AsyncSession = Depends(get_db)):
    """Get summary statistics for ideas"""
    try:
        return summarize_ideas(await load_ideas(db))

    except Exception as e:
        logger.error(f"Error fetching ideas stats: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching statistics")


@router.get("/export/csv")
async def export_ideas_csv(
    run_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Export ranked ideas as CSV"""
    try:
        ranked = await load_ranked_ideas(db, run_id)
        content = ExportService().export_to_csv(ranked)
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=ideas.csv"}
        )

    except Exception as e:
        logger.error(f"Error exporting ideas to CSV: {str(e)}")
        raise HTTPException(status_code=500, detail="Error exporting ideas")


@router.get("/export/pdf")
async def export_ideas_pdf(
    run_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Export ranked ideas as PDF"""
    try:
        ranked = await load_ranked_ideas(db, run_id)
        content = ExportService().export_to_pdf(ranked)
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": "attachment; filename=ideas.pdf"}
        )

    except Exception as e:
        logger.error(f"Error exporting ideas to PDF: {str(e)}")
        raise HTTPException(status_code=500, detail="Error exporting ideas")


@router.get("/{idea_id}")
async def get_idea(
    idea_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific idea"""
    try:
        idea = await db.get(Idea, idea_id)

        if not idea:
            raise HTTPException(status_code=404, detail="Idea not found")

        return idea.model_dump()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching idea {idea_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching idea")


@router.patch("/{idea_id}")
async def update_idea(
    idea_id: str,
    update: IdeaUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update the lifecycle flags of an idea"""
    changes = update.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    try:
        idea = await db.get(Idea, idea_id)

        if not idea:
            raise HTTPException(status_code=404, detail="Idea not found")

        for field, value in changes.items():
            setattr(idea, field, value)
        db.add(idea)
        await db.commit()

        logger.info(f"Updated idea {idea_id}: {changes}")
        return idea.model_dump()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating idea {idea_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error updating idea")
