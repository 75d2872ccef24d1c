"""
Daily idea pipeline: generate, validate, filter, rank and store
"""
import asyncio
import time
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.logging_config import logger
from app.models import Idea, IdeaRun, PipelineError, RankedIdea, RawIdea
from app.providers import DataForSEOProvider, TavilyProvider
from app.services.ai_service import AIService, get_mock_ideas
from app.services.ranking import filter_valid_ideas, rank_ideas
from app.services.validator import IdeaValidator


@dataclass
class PipelineResult:
    run: IdeaRun
    ideas: List[Idea]
    ranked_ideas: List[RankedIdea]
    errors: List[str] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def aggregate_demand_evidence(research) -> str:
    """Join the first two snippets of every research result"""
    return " | ".join(
        snippet
        for result in research
        for snippet in result.snippets[:2]
    )


class IdeaPipeline:
    """Orchestrates idea generation, market validation and ranking"""

    def __init__(
        self,
        ai_service: Optional[AIService] = None,
        keyword_provider: Optional[DataForSEOProvider] = None,
        research_provider: Optional[TavilyProvider] = None,
        validator: Optional[IdeaValidator] = None,
        max_ideas: Optional[int] = None,
        max_concurrent: Optional[int] = None
    ):
        self.ai_service = ai_service
        self.keyword_provider = keyword_provider or DataForSEOProvider()
        self.research_provider = research_provider or TavilyProvider()
        self.validator = validator or IdeaValidator(ai_service)
        self.max_ideas = max_ideas or settings.MAX_IDEAS_PER_RUN
        self.max_concurrent = max_concurrent or settings.MAX_CONCURRENT_VALIDATIONS

    def initialize_ai_service(self):
        """Initialize AI service if an API key is available"""
        if self.ai_service is not None:
            return
        try:
            self.ai_service = AIService()
            self.validator.ai_service = self.ai_service
            logger.info("AI service initialized successfully")
        except ValueError as e:
            logger.warning(f"AI service not available: {str(e)}")
            self.ai_service = None

    async def generate_raw_ideas(self) -> List[RawIdea]:
        if self.ai_service is None:
            logger.warning("No AI service available, using mock ideas")
            return get_mock_ideas()
        return await self.ai_service.generate_raw_ideas()

    async def validate_raw_idea(self, raw_idea: RawIdea) -> Idea:
        """
        Enrich and validate one raw idea

        Args:
            raw_idea: Generated idea

        Returns:
            Idea with market signals and validation attached
        """
        keywords = raw_idea.primary_keywords or [raw_idea.name]
        keyword_data = await self.keyword_provider.get_best_keyword(keywords)
        research = await self.research_provider.research_idea(raw_idea.name, keywords)
        validation = await self.validator.validate(raw_idea, keyword_data, research)

        return Idea(
            id=str(uuid4()),
            name=raw_idea.name,
            one_liner=raw_idea.one_liner,
            platform=validation.platform_decision,
            primary_keyword=keyword_data.keyword,
            monthly_search_volume=keyword_data.monthly_volume,
            cpc_usd=keyword_data.cpc,
            competition_score=keyword_data.competition,
            competition_level=validation.competition_level,
            estimated_revenue_low_usd=validation.estimated_revenue_low_usd,
            estimated_revenue_high_usd=validation.estimated_revenue_high_usd,
            development_cost_usd=validation.development_cost_usd,
            time_to_mvp_months=validation.time_to_mvp_months,
            success_probability=validation.success_probability,
            demand_evidence=validation.demand_evidence or aggregate_demand_evidence(research),
            why_this_wins=validation.why_this_wins,
            validation_raw={
                "keyword_data": keyword_data.model_dump(),
                "research_data": [result.model_dump() for result in research],
                "validation": validation.model_dump()
            }
        )

    async def validate_all(self, raw_ideas: List[RawIdea]) -> Tuple[List[Idea], List[str]]:
        """
        Validate raw ideas concurrently

        A failed idea is logged and skipped; it does not abort the batch.

        Returns:
            Tuple of (validated ideas, error messages)
        """
        semaphore = asyncio.Semaphore(self.max_concurrent)
        total = len(raw_ideas)

        async def process(index: int, raw_idea: RawIdea) -> Tuple[Optional[Idea], Optional[str]]:
            async with semaphore:
                try:
                    logger.info(f"[{index}/{total}] Validating \"{raw_idea.name}\"...")
                    return await self.validate_raw_idea(raw_idea), None
                except Exception as e:
                    logger.error(f"Failed to validate \"{raw_idea.name}\": {str(e)}")
                    return None, f"Failed to validate \"{raw_idea.name}\": {str(e)}"

        results = await asyncio.gather(
            *(process(index, raw_idea) for index, raw_idea in enumerate(raw_ideas, start=1))
        )

        validated = [idea for idea, _ in results if idea is not None]
        errors = [error for _, error in results if error is not None]
        return validated, errors

    def build_run(self, run_id: str, raw_count: int, validated_count: int, top_ideas: List[Idea]) -> IdeaRun:
        average_volume = 0
        if top_ideas:
            average_volume = round(
                sum(idea.monthly_search_volume or 0 for idea in top_ideas) / len(top_ideas)
            )

        return IdeaRun(
            id=run_id,
            run_date=date.today(),
            ideas_generated=len(top_ideas),
            top_success_score=top_ideas[0].success_probability if top_ideas else 0,
            average_search_volume=average_volume,
            notes=(
                f"Generated {raw_count} raw ideas, validated {validated_count}, "
                f"filtered to {len(top_ideas)}"
            )
        )

    async def run(self, db: AsyncSession) -> PipelineResult:
        """
        Run the complete pipeline and persist the results

        Args:
            db: Database session

        Returns:
            PipelineResult with the stored run and ideas in rank order
        """
        run_id = str(uuid4())
        start_time = time.monotonic()
        log_extra = {"run_id": run_id}

        try:
            self.initialize_ai_service()

            logger.info("Step 1/5: Generating raw ideas", extra=log_extra)
            raw_ideas = await self.generate_raw_ideas()
            logger.info(f"Generated {len(raw_ideas)} raw ideas", extra=log_extra)

            logger.info("Step 2/5: Validating ideas", extra=log_extra)
            validated, errors = await self.validate_all(raw_ideas)
            logger.info(f"Successfully validated {len(validated)} ideas", extra=log_extra)

            logger.info("Step 3/5: Filtering ideas by quality thresholds", extra=log_extra)
            filtered = filter_valid_ideas(validated)
            logger.info(f"{len(filtered)} ideas passed quality filters", extra=log_extra)

            logger.info("Step 4/5: Ranking ideas by composite score", extra=log_extra)
            ranked = rank_ideas(filtered)[:self.max_ideas]
            by_id = {idea.id: idea for idea in filtered}
            top_ideas = [by_id[ranked_idea.id] for ranked_idea in ranked]

            logger.info("Step 5/5: Storing results", extra=log_extra)
            run = self.build_run(run_id, len(raw_ideas), len(validated), top_ideas)
            db.add(run)
            await db.flush()

            for idea in top_ideas:
                idea.run_id = run.id
                db.add(idea)
            for ranked_idea in ranked:
                ranked_idea.run_id = run.id

            for message in errors:
                db.add(PipelineError(
                    run_id=run.id,
                    source="pipeline",
                    error_message=message,
                    error_type="ValidationError"
                ))
            for provider in (self.keyword_provider, self.research_provider):
                for error in provider.get_failed_requests(run.id):
                    db.add(error)
                provider.clear_failed_requests()

            await db.commit()

            duration = time.monotonic() - start_time
            stats = {
                "raw_ideas": len(raw_ideas),
                "validated": len(validated),
                "filtered": len(filtered),
                "stored": len(top_ideas),
                "errors": len(errors),
                "duration_seconds": round(duration, 2)
            }
            logger.info(f"Pipeline completed: {stats}", extra=log_extra)
            if top_ideas:
                logger.info(
                    f"Top idea: {top_ideas[0].name} ({top_ideas[0].success_probability}% success)",
                    extra=log_extra
                )

            return PipelineResult(run=run, ideas=top_ideas, ranked_ideas=ranked, errors=errors, stats=stats)

        except Exception as e:
            logger.error(f"Pipeline failed: {str(e)}", extra=log_extra)
            await db.rollback()
            raise
