"""
API routes for build plan generation
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel
from app.database import get_db
from app.models import Idea
from app.services.ai_service import AIService
from app.services.build_plan_service import BuildPlanService
from app.logging_config import logger

router = APIRouter(prefix="/build-plan", tags=["build-plan"])


class BuildPlanRequest(SQLModel):
    idea_id: str


def get_build_plan_service() -> BuildPlanService:
    """Dependency providing a build plan service, with AI when configured"""
    try:
        ai_service = AIService()
    except ValueError as e:
        logger.warning(f"AI service not available, using template build plans: {str(e)}")
        ai_service = None
    return BuildPlanService(ai_service)


async def generate_build_plan(db: AsyncSession, service: BuildPlanService, idea_id: str):
    """
    Generate a build plan for a stored idea and mark the idea as chosen

    Returns:
        Tuple of (idea, build plan)

    Raises:
        HTTPException: 404 if the idea does not exist
    """
    idea = await db.get(Idea, idea_id)

    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")

    build_plan = await service.create_build_plan(idea)

    idea.chosen = True
    db.add(idea)
    await db.commit()

    logger.info(f"Build plan generated for: {idea.name}")
    return idea, build_plan


@router.post("")
async def create_build_plan(
    request: BuildPlanRequest,
    db: AsyncSession = Depends(get_db),
    service: BuildPlanService = Depends(get_build_plan_service)
):
    """Generate a build plan for an idea and mark it as chosen"""
    try:
        _, build_plan = await generate_build_plan(db, service, request.idea_id)
        return {"build_plan": build_plan.model_dump()}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating build plan: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate build plan")
