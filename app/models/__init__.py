# Database models package
from .idea import CompetitionLevel, Platform, IdeaBase, Idea, RankedIdea, normalize_platform
from .idea_run import IdeaRun
from .error import PipelineError
from .market import RawIdea, KeywordData, ResearchResult, ValidationResult
from .build_plan import MarketingPlan, ProductSpec, BuildPlan

__all__ = [
    "CompetitionLevel",
    "Platform",
    "IdeaBase",
    "Idea",
    "RankedIdea",
    "normalize_platform",
    "IdeaRun",
    "PipelineError",
    "RawIdea",
    "KeywordData",
    "ResearchResult",
    "ValidationResult",
    "MarketingPlan",
    "ProductSpec",
    "BuildPlan",
]
