from datetime import date, datetime
from typing import Optional
from uuid import uuid4
from sqlmodel import Field, SQLModel


class IdeaRun(SQLModel, table=True):
    __tablename__ = "idea_runs"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    run_date: date = Field(default_factory=date.today)
    ideas_generated: int = Field(default=0)
    top_success_score: int = Field(default=0)
    average_search_volume: int = Field(default=0)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
