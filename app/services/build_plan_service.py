"""
Build plan generation: marketing plan and product specification for a chosen idea
"""
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from app.logging_config import logger
from app.models import BuildPlan, Idea, MarketingPlan, ProductSpec
from app.services.ai_service import AIService, LLMResponseError

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"

MARKETING_SYSTEM_PROMPT = """You are an expert growth marketer and GTM strategist. Create a comprehensive marketing plan for the following validated product idea.

Return a JSON object with:
{
  "personas": ["Persona 1: [name] - [1-2 sentence description]", ...],
  "gtm_strategy": "<comprehensive 3-4 paragraph GTM plan>",
  "target_audience": ["Segment 1", "Segment 2", ...],
  "launch_channels": ["Channel 1: [rationale]", ...],
  "ad_creatives": ["Creative 1: [platform] - [hook] - [CTA]", ...],
  "ninety_day_calendar": "<markdown formatted calendar with weeks 1-12>"
}

Base recommendations on the validated search volume and competition data, the platform type and the target revenue range."""

PRODUCT_SYSTEM_PROMPT = """You are an expert product manager and technical architect. Create product development documentation for the following validated idea.

Return a JSON object with:
{
  "prd_full": "<comprehensive PRD in markdown>",
  "db_schema": "<SQL or schema description>",
  "api_spec": "<API endpoints and contracts>",
  "wireframes_text": "<text description of key screens/flows>",
  "tech_stack": ["Technology 1: [reason]", ...],
  "core_features": ["Feature 1 (Must-have)", "Feature 2 (Should-have)", ...],
  "mvp_roadmap": "<week-by-week plan>"
}

Consider the platform type, the development budget, the time to MVP and solo developer / small team constraints."""


def format_usd(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"${value:,.0f}"


def format_number(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.0f}"


def _string_list(payload: Dict[str, Any], field: str) -> List[str]:
    value = payload.get(field) or []
    if not isinstance(value, list):
        raise LLMResponseError(f"Expected a list for {field}")
    return [str(item) for item in value]


def _string(payload: Dict[str, Any], field: str) -> str:
    value = payload.get(field) or ""
    if not isinstance(value, str):
        raise LLMResponseError(f"Expected a string for {field}")
    return value


def idea_context(idea: Idea) -> str:
    """Shared prompt context describing an idea"""
    return (
        "PRODUCT IDEA:\n"
        f"Name: {idea.name}\n"
        f"Description: {idea.one_liner}\n"
        f"Platform: {idea.platform}\n\n"
        "MARKET DATA:\n"
        f"- Primary Keyword: {idea.primary_keyword}\n"
        f"- Monthly Search Volume: {format_number(idea.monthly_search_volume)}\n"
        f"- Competition Level: {idea.competition_level}\n"
        f"- Target Revenue: {format_usd(idea.estimated_revenue_low_usd)} - "
        f"{format_usd(idea.estimated_revenue_high_usd)}/year\n"
        f"- Success Probability: {idea.success_probability}%\n"
        f"- Development Budget: ~{format_usd(idea.development_cost_usd)}\n"
        f"- Time to MVP: {idea.time_to_mvp_months or 3} months\n\n"
        f"DEMAND SIGNALS:\n{idea.demand_evidence}\n\n"
        f"WHY THIS WINS:\n{idea.why_this_wins}"
    )


def mock_marketing_plan(idea: Idea) -> MarketingPlan:
    return MarketingPlan(
        personas=[
            "Tech-Savvy Early Adopter - 25-35 year old professional who actively seeks productivity tools",
            "Small Business Owner - 35-50 year old entrepreneur looking for cost-effective solutions",
            "Freelancer/Creator - 22-40 year old independent worker needing specialized tools"
        ],
        gtm_strategy=(
            f"Launch {idea.name} with a product-led growth strategy targeting {idea.platform} users. "
            "Phase 1 (Months 1-2): Build waitlist through content marketing and social proof. "
            f'Focus on SEO for "{idea.primary_keyword}" and related terms. '
            "Phase 2 (Month 3): Limited beta launch to first 100 users, gather testimonials. "
            "Phase 3 (Months 4-6): Public launch with ProductHunt, paid acquisition and partnerships."
        ),
        target_audience=[
            "Early adopters in tech/startup space",
            "Productivity-focused professionals",
            "Small teams and solopreneurs"
        ],
        launch_channels=[
            "ProductHunt - Launch day featuring",
            "Reddit - Organic posts in relevant communities",
            "Google Ads - Search campaigns for high-intent keywords",
            "Content Marketing - SEO-optimized blog posts"
        ],
        ad_creatives=[
            f'Google Search - "Stop wasting time. Try {idea.name} free."',
            "Facebook/Instagram - Before/After visual showing time saved",
            f"TikTok - Quick demo showing the moment {idea.name} clicks in 15 seconds"
        ],
        ninety_day_calendar=(
            "### Month 1: Pre-Launch & Validation\n"
            "- Week 1-2: Landing page + waitlist\n"
            "- Week 3-4: Content creation and beta recruitment\n\n"
            "### Month 2: Beta & Iteration\n"
            "- Week 5-8: Private beta, testimonials, refinement\n\n"
            "### Month 3: Public Launch\n"
            "- Week 9-12: ProductHunt launch, paid acquisition, funnel optimization"
        )
    )


def mock_product_spec(idea: Idea) -> ProductSpec:
    months = idea.time_to_mvp_months or 3
    return ProductSpec(
        prd_full=(
            f"# Product Requirements Document: {idea.name}\n\n"
            f"## Overview\n{idea.one_liner}\n\n"
            f"## Problem Statement\n{idea.demand_evidence}\n\n"
            f"## Solution\n{idea.why_this_wins}"
        ),
        db_schema=(
            "CREATE TABLE users (id UUID PRIMARY KEY, email TEXT UNIQUE NOT NULL, created_at TIMESTAMP);\n"
            "CREATE TABLE workspaces (id UUID PRIMARY KEY, owner_id UUID REFERENCES users(id), name TEXT);"
        ),
        api_spec="POST /api/auth/signup\nPOST /api/auth/login\nGET /api/workspaces\nPOST /api/workspaces",
        wireframes_text="1. Landing page with value proposition\n2. Onboarding flow\n3. Main dashboard\n4. Settings",
        tech_stack=[
            "FastAPI: async Python backend",
            "PostgreSQL: relational storage",
            "Stripe: subscription billing"
        ],
        core_features=[
            "User authentication (Must-have)",
            f"Core {idea.primary_keyword or idea.name} workflow (Must-have)",
            "Team sharing (Should-have)",
            "Integrations marketplace (Could-have)"
        ],
        mvp_roadmap=f"{months}-month plan: foundations, core workflow, beta, launch."
    )


class BuildPlanService:
    """Generates marketing and product documents for an idea"""

    def __init__(self, ai_service: Optional[AIService] = None, templates_dir: Path = TEMPLATES_DIR):
        self.ai_service = ai_service
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )
        self.env.filters["usd"] = format_usd
        self.env.filters["number"] = format_number

    async def generate_marketing_plan(self, idea: Idea) -> MarketingPlan:
        if self.ai_service is None:
            return mock_marketing_plan(idea)
        try:
            payload = await self.ai_service.complete_json(
                MARKETING_SYSTEM_PROMPT,
                idea_context(idea) + "\n\nGenerate the complete marketing plan now.",
                temperature=0.7
            )
            return MarketingPlan(
                personas=_string_list(payload, "personas"),
                gtm_strategy=_string(payload, "gtm_strategy"),
                target_audience=_string_list(payload, "target_audience"),
                launch_channels=_string_list(payload, "launch_channels"),
                ad_creatives=_string_list(payload, "ad_creatives"),
                ninety_day_calendar=_string(payload, "ninety_day_calendar")
            )
        except Exception as e:
            logger.error(f"Error generating marketing plan for {idea.name}: {str(e)}")
            return mock_marketing_plan(idea)

    async def generate_product_spec(self, idea: Idea) -> ProductSpec:
        if self.ai_service is None:
            return mock_product_spec(idea)
        try:
            payload = await self.ai_service.complete_json(
                PRODUCT_SYSTEM_PROMPT,
                idea_context(idea) + "\n\nGenerate complete product specification now.",
                temperature=0.6,
                max_tokens=4000
            )
            return ProductSpec(
                prd_full=_string(payload, "prd_full"),
                db_schema=_string(payload, "db_schema"),
                api_spec=_string(payload, "api_spec"),
                wireframes_text=_string(payload, "wireframes_text"),
                tech_stack=_string_list(payload, "tech_stack"),
                core_features=_string_list(payload, "core_features"),
                mvp_roadmap=_string(payload, "mvp_roadmap")
            )
        except Exception as e:
            logger.error(f"Error generating product spec for {idea.name}: {str(e)}")
            return mock_product_spec(idea)

    def render_markdown(self, idea: Idea, marketing: MarketingPlan, product: ProductSpec) -> str:
        template = self.env.get_template("build_plan.md.j2")
        return template.render(idea=idea, marketing=marketing, product=product)

    async def create_build_plan(self, idea: Idea) -> BuildPlan:
        """
        Generate the full build plan for an idea

        Marketing and product documents are generated concurrently.

        Args:
            idea: Stored idea

        Returns:
            BuildPlan with both documents and the combined markdown
        """
        logger.info(f"Generating build plan for: {idea.name}")
        marketing, product = await asyncio.gather(
            self.generate_marketing_plan(idea),
            self.generate_product_spec(idea)
        )

        return BuildPlan(
            idea_id=idea.id,
            marketing=marketing,
            product=product,
            markdown_full=self.render_markdown(idea, marketing, product)
        )
