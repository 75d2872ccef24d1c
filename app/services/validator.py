"""
Idea validation: turns keyword and research signals into a scored validation result
"""
import math
from typing import Any, Dict, List, Optional

from app.logging_config import logger
from app.models import (
    CompetitionLevel,
    KeywordData,
    RawIdea,
    ResearchResult,
    ValidationResult,
    normalize_platform,
)
from app.services.ai_service import AIService, LLMResponseError

VALIDATION_SYSTEM_PROMPT = """You are an expert product validator and market analyst. Analyze the following product idea and provide a detailed validation assessment.

Use the keyword volume, competition data, and research snippets to make data-driven decisions.

Return a JSON object with:
{
  "success_probability": <0-100 integer>,
  "estimated_revenue_low_usd": <number>,
  "estimated_revenue_high_usd": <number>,
  "development_cost_usd": <number>,
  "time_to_mvp_months": <integer>,
  "platform_decision": "<mobile-first|web|desktop|browser-extension>",
  "competition_level": "<low|medium|high|very_high>",
  "why_this_wins": "<1-2 sentence explanation>",
  "demand_evidence": "<aggregated summary of demand signals from research>"
}

Guidelines:
- success_probability should be 80-95 for strong ideas, 60-79 for decent ideas, below 60 for weak ideas
- estimated_revenue should be realistic annual revenue ranges
- development_cost should factor in indie developer rates (~$50-100/hr)
- time_to_mvp_months should be realistic for a solo dev or small team
- Base competition_level on keyword competition data AND research insights
- why_this_wins should be specific and data-backed
- demand_evidence should cite specific complaints, requests, or market signals from the research"""

DEFAULT_REVENUE_LOW_USD = 50000
DEFAULT_REVENUE_HIGH_USD = 200000
DEFAULT_DEVELOPMENT_COST_USD = 20000
DEFAULT_TIME_TO_MVP_MONTHS = 3

_COMPETITION_LEVELS = {level.value for level in CompetitionLevel}


def build_validation_prompt(
    raw_idea: RawIdea,
    keyword_data: KeywordData,
    research: List[ResearchResult]
) -> str:
    """Render the user prompt for a validation call"""
    findings = []
    for index, result in enumerate(research, start=1):
        snippets = "\n".join(f"  - {snippet}" for snippet in result.snippets[:3])
        findings.append(f"Query {index}: {result.query}\nFindings:\n{snippets}")

    return (
        "PRODUCT IDEA:\n"
        f"Name: {raw_idea.name}\n"
        f"Description: {raw_idea.one_liner}\n"
        f"Suspected Platform: {raw_idea.suspected_platform}\n\n"
        "KEYWORD DATA:\n"
        f"- Primary Keyword: {keyword_data.keyword}\n"
        f"- Monthly Search Volume: {keyword_data.monthly_volume:,}\n"
        f"- CPC: ${keyword_data.cpc}\n"
        f"- Competition Score: {keyword_data.competition} ({keyword_data.competition_level})\n\n"
        "MARKET RESEARCH (from Reddit, Twitter, ProductHunt, etc.):\n"
        + "\n\n".join(findings)
        + "\n\nProvide your validation assessment now."
    )


def _number(
    payload: Dict[str, Any],
    field: str,
    default: Optional[float],
    non_negative: bool = True
) -> Optional[float]:
    value = payload.get(field)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise LLMResponseError(f"Invalid value for {field}: {value!r}")
    if non_negative and value < 0:
        raise LLMResponseError(f"Negative value for {field}: {value!r}")
    return value


def _text(payload: Dict[str, Any], field: str, default: str) -> str:
    value = payload.get(field)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def parse_validation(
    payload: Dict[str, Any],
    raw_idea: RawIdea,
    keyword_data: KeywordData
) -> ValidationResult:
    """
    Validate a model's validation payload into a ValidationResult

    success_probability is required and clamped to [0, 100]. An unknown
    competition level falls back to the keyword provider's level and
    missing optional numbers take documented defaults.

    Raises:
        LLMResponseError: If success_probability is missing or a number is malformed
    """
    probability = _number(payload, "success_probability", None, non_negative=False)
    if probability is None:
        raise LLMResponseError("Missing required field: success_probability")
    success_probability = int(round(max(0.0, min(100.0, probability))))

    competition_level = payload.get("competition_level")
    if not isinstance(competition_level, str) or competition_level not in _COMPETITION_LEVELS:
        competition_level = keyword_data.competition_level

    return ValidationResult(
        success_probability=success_probability,
        estimated_revenue_low_usd=_number(payload, "estimated_revenue_low_usd", DEFAULT_REVENUE_LOW_USD),
        estimated_revenue_high_usd=_number(payload, "estimated_revenue_high_usd", DEFAULT_REVENUE_HIGH_USD),
        development_cost_usd=_number(payload, "development_cost_usd", DEFAULT_DEVELOPMENT_COST_USD),
        time_to_mvp_months=int(_number(payload, "time_to_mvp_months", DEFAULT_TIME_TO_MVP_MONTHS)),
        platform_decision=normalize_platform(
            _text(payload, "platform_decision", raw_idea.suspected_platform)
        ).value,
        competition_level=competition_level,
        why_this_wins=_text(payload, "why_this_wins", "Strong market demand with underserved niche."),
        demand_evidence=_text(payload, "demand_evidence", "Multiple requests found across social platforms.")
    )


def fallback_validation(raw_idea: RawIdea, keyword_data: KeywordData) -> ValidationResult:
    """
    Heuristic validation from keyword data alone

    Starts at 70, rewards volume, low competition and commercial CPC, and
    keeps the probability within [50, 95].
    """
    volume = keyword_data.monthly_volume
    competition = keyword_data.competition
    cpc = keyword_data.cpc

    success_probability = 70
    if volume > 50000:
        success_probability += 10
    if volume > 100000:
        success_probability += 5

    if competition < 0.3:
        success_probability += 10
    elif competition > 0.7:
        success_probability -= 15

    if cpc > 3:
        success_probability += 5

    success_probability = max(50, min(95, success_probability))

    return ValidationResult(
        success_probability=success_probability,
        estimated_revenue_low_usd=math.floor(volume * cpc * 0.02 * 12),
        estimated_revenue_high_usd=math.floor(volume * cpc * 0.1 * 12),
        development_cost_usd=25000,
        time_to_mvp_months=3,
        platform_decision=normalize_platform(raw_idea.suspected_platform).value,
        competition_level=keyword_data.competition_level,
        why_this_wins=(
            f"{volume:,} monthly searches with {keyword_data.competition_level} competition. "
            f"Strong CPC of ${cpc} indicates commercial intent."
        ),
        demand_evidence=(
            f'Primary keyword "{keyword_data.keyword}" shows {volume:,} monthly searches. '
            "Research indicates active discussions on Reddit and Twitter."
        ),
        is_fallback=True
    )


class IdeaValidator:
    """Scores ideas with the model, falling back to a keyword heuristic"""

    def __init__(self, ai_service: Optional[AIService] = None, temperature: float = 0.3):
        self.ai_service = ai_service
        self.temperature = temperature

    async def validate(
        self,
        raw_idea: RawIdea,
        keyword_data: KeywordData,
        research: List[ResearchResult]
    ) -> ValidationResult:
        """
        Validate an idea

        Args:
            raw_idea: Generated idea
            keyword_data: Best keyword for the idea
            research: Research results for the idea

        Returns:
            ValidationResult from the model, or the heuristic fallback
        """
        if self.ai_service is None:
            logger.warning(f"No AI service configured, using heuristic validation for {raw_idea.name}")
            return fallback_validation(raw_idea, keyword_data)

        try:
            payload = await self.ai_service.complete_json(
                VALIDATION_SYSTEM_PROMPT,
                build_validation_prompt(raw_idea, keyword_data, research),
                temperature=self.temperature
            )
            return parse_validation(payload, raw_idea, keyword_data)

        except Exception as e:
            logger.error(f"Error validating {raw_idea.name}, using heuristic validation: {str(e)}")
            return fallback_validation(raw_idea, keyword_data)
