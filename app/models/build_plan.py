from typing import List
from sqlmodel import Field, SQLModel


class MarketingPlan(SQLModel):
    personas: List[str] = Field(default_factory=list)
    gtm_strategy: str = ""
    target_audience: List[str] = Field(default_factory=list)
    launch_channels: List[str] = Field(default_factory=list)
    ad_creatives: List[str] = Field(default_factory=list)
    ninety_day_calendar: str = ""


class ProductSpec(SQLModel):
    prd_full: str = ""
    db_schema: str = ""
    api_spec: str = ""
    wireframes_text: str = ""
    tech_stack: List[str] = Field(default_factory=list)
    core_features: List[str] = Field(default_factory=list)
    mvp_roadmap: str = ""


class BuildPlan(SQLModel):
    idea_id: str
    marketing: MarketingPlan
    product: ProductSpec
    markdown_full: str
