"""
Transient market-signal records passed between providers, the validator and the pipeline
"""
from typing import List, Optional
from sqlmodel import Field, SQLModel


class RawIdea(SQLModel):
    name: str
    one_liner: str
    suspected_platform: str
    primary_keywords: List[str] = Field(default_factory=list)


class KeywordData(SQLModel):
    keyword: str
    monthly_volume: int = 0
    cpc: float = 0.0
    competition: float = 0.0  # 0-1 from the provider
    competition_level: str = "medium"
    intent: Optional[str] = None


class ResearchResult(SQLModel):
    query: str
    snippets: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)


class ValidationResult(SQLModel):
    success_probability: int
    estimated_revenue_low_usd: float
    estimated_revenue_high_usd: float
    development_cost_usd: float
    time_to_mvp_months: int
    platform_decision: str
    competition_level: str
    why_this_wins: str
    demand_evidence: str
    is_fallback: bool = False
