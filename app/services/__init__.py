# Business logic services package
from .ai_service import AIService, LLMResponseError
from .validator import IdeaValidator
from .pipeline import IdeaPipeline, PipelineResult
from .build_plan_service import BuildPlanService
from .export_service import ExportService
from .ranking import calculate_composite_score, filter_valid_ideas, rank_ideas

__all__ = [
    "AIService",
    "LLMResponseError",
    "IdeaValidator",
    "IdeaPipeline",
    "PipelineResult",
    "BuildPlanService",
    "ExportService",
    "calculate_composite_score",
    "filter_valid_ideas",
    "rank_ideas"
]
