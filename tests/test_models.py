"""
Unit tests for database models
"""
import pytest
from datetime import date, datetime
from app.models import (
    BuildPlan,
    Idea,
    IdeaRun,
    MarketingPlan,
    PipelineError,
    Platform,
    ProductSpec,
    RankedIdea,
    normalize_platform,
)


class TestIdeaModel:
    """Test Idea model defaults and fields"""

    def test_idea_creation(self):
        """Test creating a valid idea"""
        idea = Idea(
            name="AsyncStandup",
            one_liner="Video-based async standups for remote teams",
            platform="web",
            primary_keyword="async standup",
            monthly_search_volume=24000,
            competition_level="medium",
            estimated_revenue_low_usd=50000,
            estimated_revenue_high_usd=200000,
            success_probability=82
        )

        assert idea.name == "AsyncStandup"
        assert idea.monthly_search_volume == 24000
        assert idea.success_probability == 82
        assert isinstance(idea.created_at, datetime)

    def test_idea_defaults(self):
        """Test lifecycle flags and optional signals default correctly"""
        idea = Idea(name="Test", one_liner="Test idea", success_probability=60)

        assert idea.chosen is False
        assert idea.built is False
        assert idea.sold is False
        assert idea.monthly_search_volume is None
        assert idea.competition_level is None
        assert idea.run_id is None
        assert len(idea.id) == 36

    def test_idea_ids_are_unique(self):
        first = Idea(name="A", one_liner="a", success_probability=50)
        second = Idea(name="B", one_liner="b", success_probability=50)
        assert first.id != second.id

    def test_idea_with_validation_raw(self):
        """Test idea with raw validation snapshot"""
        raw = {"keyword_data": {"keyword": "async standup", "monthly_volume": 24000}}
        idea = Idea(name="Test", one_liner="Test idea", success_probability=60, validation_raw=raw)

        assert idea.validation_raw["keyword_data"]["monthly_volume"] == 24000

    def test_ranked_idea_requires_score_and_rank(self):
        ranked = RankedIdea(
            name="Test", one_liner="Test idea", success_probability=60,
            composite_score=0.24, rank=1
        )

        assert ranked.composite_score == 0.24
        assert ranked.rank == 1


class TestNormalizePlatform:
    """Test mapping free-form platform text onto the enumeration"""

    @pytest.mark.parametrize("value,expected", [
        ("mobile-first", Platform.MOBILE_FIRST),
        ("Mobile", Platform.MOBILE_FIRST),
        ("web PWA", Platform.WEB),
        ("web", Platform.WEB),
        ("desktop", Platform.DESKTOP),
        ("browser extension", Platform.BROWSER_EXTENSION),
        ("Chrome Extension", Platform.BROWSER_EXTENSION),
    ])
    def test_known_values(self, value, expected):
        assert normalize_platform(value) == expected

    def test_unknown_value_uses_default(self):
        assert normalize_platform("visionOS") == Platform.WEB
        assert normalize_platform(None, default=Platform.DESKTOP) == Platform.DESKTOP


class TestIdeaRunModel:
    """Test IdeaRun model"""

    def test_run_defaults(self):
        run = IdeaRun()

        assert run.run_date == date.today()
        assert run.ideas_generated == 0
        assert run.top_success_score == 0
        assert run.notes is None
        assert isinstance(run.created_at, datetime)


class TestPipelineErrorModel:
    """Test PipelineError model"""

    def test_error_creation(self):
        """Test creating an error record"""
        error = PipelineError(
            source="tavily",
            context="https://api.tavily.com/search",
            error_message="Max retries exceeded",
            error_type="MaxRetriesError",
            retry_count=3
        )

        assert error.source == "tavily"
        assert error.error_type == "MaxRetriesError"
        assert error.retry_count == 3
        assert isinstance(error.occurred_at, datetime)

    def test_error_minimal_fields(self):
        """Test error with only required fields"""
        error = PipelineError(source="pipeline")

        assert error.context is None
        assert error.error_message is None
        assert error.run_id is None
        assert error.retry_count == 0


class TestBuildPlanModels:
    """Test build plan documents"""

    def test_empty_documents(self):
        marketing = MarketingPlan()
        product = ProductSpec()

        assert marketing.personas == []
        assert marketing.gtm_strategy == ""
        assert product.tech_stack == []

        plan = BuildPlan(idea_id="abc", marketing=marketing, product=product, markdown_full="# Plan")
        assert plan.model_dump()["marketing"]["personas"] == []
