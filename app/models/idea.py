from datetime import datetime
from enum import Enum
from typing import Optional, Dict
from uuid import uuid4
from sqlmodel import Field, SQLModel, Column, JSON


class CompetitionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Platform(str, Enum):
    MOBILE_FIRST = "mobile-first"
    WEB = "web"
    DESKTOP = "desktop"
    BROWSER_EXTENSION = "browser-extension"


_PLATFORM_ALIASES = {
    "mobile": Platform.MOBILE_FIRST,
    "mobile first": Platform.MOBILE_FIRST,
    "ios": Platform.MOBILE_FIRST,
    "android": Platform.MOBILE_FIRST,
    "web pwa": Platform.WEB,
    "pwa": Platform.WEB,
    "saas": Platform.WEB,
    "browser extension": Platform.BROWSER_EXTENSION,
    "chrome extension": Platform.BROWSER_EXTENSION,
    "extension": Platform.BROWSER_EXTENSION,
}


def normalize_platform(value: Optional[str], default: Platform = Platform.WEB) -> Platform:
    """Map free-form platform text from the model onto the Platform enumeration"""
    if not value:
        return default
    cleaned = value.strip().lower()
    for platform in Platform:
        if cleaned == platform.value:
            return platform
    if cleaned in _PLATFORM_ALIASES:
        return _PLATFORM_ALIASES[cleaned]
    if "extension" in cleaned:
        return Platform.BROWSER_EXTENSION
    if "mobile" in cleaned:
        return Platform.MOBILE_FIRST
    if "desktop" in cleaned:
        return Platform.DESKTOP
    return default


class IdeaBase(SQLModel):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    run_id: Optional[str] = Field(default=None, foreign_key="idea_runs.id", index=True)
    name: str = Field(nullable=False)
    one_liner: str = Field(nullable=False)
    platform: str = Field(default=Platform.WEB.value, max_length=30)
    primary_keyword: Optional[str] = None
    monthly_search_volume: Optional[int] = Field(default=None, ge=0)
    cpc_usd: Optional[float] = None
    competition_score: Optional[float] = None
    competition_level: Optional[str] = Field(default=None, max_length=20)
    estimated_revenue_low_usd: Optional[float] = Field(default=None, ge=0)
    estimated_revenue_high_usd: Optional[float] = Field(default=None, ge=0)
    development_cost_usd: Optional[float] = None
    time_to_mvp_months: Optional[int] = None
    success_probability: int = Field(nullable=False)
    demand_evidence: Optional[str] = None
    why_this_wins: Optional[str] = None
    chosen: bool = Field(default=False)
    built: bool = Field(default=False)
    sold: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Idea(IdeaBase, table=True):
    __tablename__ = "ideas"

    validation_raw: Optional[Dict] = Field(default=None, sa_column=Column(JSON))


class RankedIdea(IdeaBase):
    """
    An idea with the scores of a single ranking pass attached

    Ranking accepts partial records, so the descriptive fields default to
    empty and a missing success probability counts as zero.
    """

    name: str = ""
    one_liner: str = ""
    success_probability: int = 0
    validation_raw: Optional[Dict] = None
    composite_score: float
    rank: int
