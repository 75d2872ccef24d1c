"""
Web routes for HTML pages
"""
from typing import Optional
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models import BuildPlan, Idea
from app.routes.build_plan import generate_build_plan, get_build_plan_service
from app.routes.ideas import load_ideas, summarize_ideas
from app.services.build_plan_service import TEMPLATES_DIR, BuildPlanService
from app.services.ranking import rank_ideas

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_idea_detail(request: Request, idea: Idea, build_plan: Optional[BuildPlan] = None):
    # Scored on its own so the page shows the idea's absolute composite score
    ranked = rank_ideas([idea])[0]
    return templates.TemplateResponse(
        request,
        "idea_detail.html",
        {
            "idea": ranked,
            "build_plan": build_plan
        }
    )


@router.get("/dashboard")
async def dashboard(request: Request, db: AsyncSession = Depends(get_db)):
    """Render dashboard page with ranked ideas"""
    ideas = await load_ideas(db)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "ideas": rank_ideas(ideas),
            "stats": summarize_ideas(ideas)
        }
    )


@router.get("/idea/{idea_id}")
async def idea_detail(idea_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    """Render a single idea with its validation details"""
    idea = await db.get(Idea, idea_id)

    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")

    return render_idea_detail(request, idea)


@router.post("/idea/{idea_id}/build-plan")
async def idea_build_plan(
    idea_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    service: BuildPlanService = Depends(get_build_plan_service)
):
    """Generate a build plan from the idea page and render it inline"""
    idea, build_plan = await generate_build_plan(db, service, idea_id)
    return render_idea_detail(request, idea, build_plan)
