"""
Unit tests for the idea pipeline
"""
import pytest
from unittest.mock import AsyncMock, Mock, patch
from app.models import Idea, IdeaRun, PipelineError, RawIdea, ResearchResult
from app.providers import DataForSEOProvider, TavilyProvider
from app.services.pipeline import IdeaPipeline, aggregate_demand_evidence
from app.services.validator import IdeaValidator


def make_raw(name: str) -> RawIdea:
    return RawIdea(
        name=name,
        one_liner=f"{name} one liner",
        suspected_platform="web",
        primary_keywords=[f"{name.lower()} app"]
    )


def make_idea(id: str, success_probability: int, volume: int, competition_level: str = "medium") -> Idea:
    return Idea(
        id=id,
        name=f"Idea {id}",
        one_liner="Test idea",
        platform="web",
        monthly_search_volume=volume,
        competition_level=competition_level,
        estimated_revenue_high_usd=200000,
        success_probability=success_probability
    )


def make_db():
    db = Mock()
    db.add = Mock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def pipeline():
    return IdeaPipeline(
        ai_service=Mock(),
        keyword_provider=DataForSEOProvider(login="", password=""),
        research_provider=TavilyProvider(api_key=""),
        validator=IdeaValidator(None),
        max_ideas=2,
        max_concurrent=2
    )


class TestIdeaPipeline:
    """Test pipeline orchestration"""

    def test_aggregate_demand_evidence(self):
        research = [
            ResearchResult(query="q1", snippets=["a", "b", "c"]),
            ResearchResult(query="q2", snippets=["d"]),
        ]
        assert aggregate_demand_evidence(research) == "a | b | d"

    @pytest.mark.asyncio
    async def test_validate_raw_idea_with_mock_providers(self):
        pipeline = IdeaPipeline(
            keyword_provider=DataForSEOProvider(login="", password=""),
            research_provider=TavilyProvider(api_key=""),
            validator=IdeaValidator(None)
        )

        idea = await pipeline.validate_raw_idea(make_raw("AirQuality"))

        assert idea.name == "AirQuality"
        assert idea.primary_keyword == "airquality app"
        assert idea.monthly_search_volume >= 10000
        assert 50 <= idea.success_probability <= 95
        assert idea.platform == "web"
        assert set(idea.validation_raw) == {"keyword_data", "research_data", "validation"}
        assert len(idea.validation_raw["research_data"]) == 4
        assert idea.validation_raw["validation"]["is_fallback"] is True

    @pytest.mark.asyncio
    async def test_validate_raw_idea_without_keywords_uses_name(self):
        pipeline = IdeaPipeline(
            keyword_provider=DataForSEOProvider(login="", password=""),
            research_provider=TavilyProvider(api_key=""),
            validator=IdeaValidator(None)
        )
        raw = RawIdea(name="HabitDuo", one_liner="Accountability partners", suspected_platform="mobile")

        idea = await pipeline.validate_raw_idea(raw)

        assert idea.primary_keyword == "HabitDuo"
        assert idea.platform == "mobile-first"

    @pytest.mark.asyncio
    async def test_validate_all_isolates_failures(self, pipeline):
        async def validate(raw_idea):
            if raw_idea.name == "Broken":
                raise RuntimeError("keyword lookup exploded")
            return make_idea(raw_idea.name, 70, 20000)

        with patch.object(pipeline, 'validate_raw_idea', side_effect=validate):
            ideas, errors = await pipeline.validate_all(
                [make_raw("One"), make_raw("Broken"), make_raw("Two")]
            )

        assert [idea.id for idea in ideas] == ["One", "Two"]
        assert len(errors) == 1
        assert "Broken" in errors[0]
        assert "keyword lookup exploded" in errors[0]

    def test_initialize_ai_service_without_key(self):
        pipeline = IdeaPipeline(
            keyword_provider=DataForSEOProvider(login="", password=""),
            research_provider=TavilyProvider(api_key="")
        )

        with patch('app.services.pipeline.AIService', side_effect=ValueError("xAI API key is required")):
            pipeline.initialize_ai_service()

        assert pipeline.ai_service is None
        assert pipeline.validator.ai_service is None

    @pytest.mark.asyncio
    async def test_generate_raw_ideas_without_ai_uses_mock(self):
        pipeline = IdeaPipeline(
            keyword_provider=DataForSEOProvider(login="", password=""),
            research_provider=TavilyProvider(api_key="")
        )

        ideas = await pipeline.generate_raw_ideas()

        assert len(ideas) == 5

    @pytest.mark.asyncio
    async def test_run_filters_ranks_and_stores(self, pipeline):
        validated = [
            make_idea("weak", 55, 15000),
            make_idea("crowded", 95, 900000, "very_high"),
            make_idea("best", 90, 200000, "low"),
            make_idea("tiny", 90, 500, "low"),
            make_idea("good", 80, 60000, "medium"),
        ]
        raw = [make_raw(f"Raw{i}") for i in range(6)]
        db = make_db()

        with patch.object(pipeline, 'generate_raw_ideas', AsyncMock(return_value=raw)):
            with patch.object(pipeline, 'validate_all', AsyncMock(return_value=(validated, ["Failed to validate \"Raw5\": boom"]))):
                result = await pipeline.run(db)

        assert [idea.id for idea in result.ideas] == ["best", "good"]
        assert [(idea.id, idea.rank) for idea in result.ranked_ideas] == [("best", 1), ("good", 2)]

        run = result.run
        assert isinstance(run, IdeaRun)
        assert run.ideas_generated == 2
        assert run.top_success_score == 90
        assert run.average_search_volume == 130000
        assert "Generated 6 raw ideas" in run.notes
        assert all(idea.run_id == run.id for idea in result.ideas)

        assert result.stats["raw_ideas"] == 6
        assert result.stats["validated"] == 5
        assert result.stats["filtered"] == 3
        assert result.stats["stored"] == 2
        assert result.stats["errors"] == 1

        added = [call.args[0] for call in db.add.call_args_list]
        assert added[0] is run
        assert [obj.id for obj in added if isinstance(obj, Idea)] == ["best", "good"]
        stored_errors = [obj for obj in added if isinstance(obj, PipelineError)]
        assert len(stored_errors) == 1
        assert stored_errors[0].source == "pipeline"
        db.flush.assert_awaited_once()
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_stores_provider_failures(self, pipeline):
        pipeline.keyword_provider._record_failed_request(
            "https://api.dataforseo.com", "Max retries exceeded", "MaxRetriesError", 3
        )
        db = make_db()

        with patch.object(pipeline, 'generate_raw_ideas', AsyncMock(return_value=[])):
            result = await pipeline.run(db)

        errors = [call.args[0] for call in db.add.call_args_list if isinstance(call.args[0], PipelineError)]
        assert len(errors) == 1
        assert errors[0].source == "dataforseo"
        assert errors[0].run_id == result.run.id
        assert pipeline.keyword_provider.failed_requests == []

    @pytest.mark.asyncio
    async def test_run_with_no_ideas(self, pipeline):
        db = make_db()

        with patch.object(pipeline, 'generate_raw_ideas', AsyncMock(return_value=[])):
            result = await pipeline.run(db)

        assert result.ideas == []
        assert result.run.ideas_generated == 0
        assert result.run.top_success_score == 0
        assert result.run.average_search_volume == 0

    @pytest.mark.asyncio
    async def test_run_rolls_back_on_failure(self, pipeline):
        db = make_db()
        db.commit.side_effect = Exception("disk full")

        with patch.object(pipeline, 'generate_raw_ideas', AsyncMock(return_value=[])):
            with pytest.raises(Exception, match="disk full"):
                await pipeline.run(db)

        db.rollback.assert_awaited_once()
