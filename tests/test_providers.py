"""
Unit tests for market-data providers
"""
import pytest
from unittest.mock import Mock, AsyncMock, patch
import httpx
from app.models import KeywordData, PipelineError
from app.providers.base_provider import BaseProvider
from app.providers.dataforseo import (
    DataForSEOProvider,
    competition_level_from_score,
    mock_keyword_data,
)
from app.providers.tavily import TavilyProvider, mock_research_result, research_queries


class ConcreteProviderForTesting(BaseProvider):
    """Concrete implementation of BaseProvider for testing"""

    @property
    def is_configured(self):
        return True


def mock_client(side_effect=None, return_value=None):
    mock_async_client = AsyncMock()
    if side_effect is not None:
        mock_async_client.request.side_effect = side_effect
    else:
        mock_async_client.request.return_value = return_value
    mock_async_client.__aenter__.return_value = mock_async_client
    return mock_async_client


def ok_response(payload=None):
    response = Mock(spec=httpx.Response)
    response.status_code = 200
    response.raise_for_status = Mock()
    response.json = Mock(return_value=payload or {})
    return response


class TestBaseProvider:
    """Test base provider retry handling"""

    @pytest.fixture
    def provider(self):
        return ConcreteProviderForTesting("test_source", max_retries=3, timeout=5)

    @pytest.mark.asyncio
    async def test_retry_request_success(self, provider):
        """Test successful request on first attempt"""
        response = ok_response()
        client = mock_client(return_value=response)

        with patch('httpx.AsyncClient', return_value=client):
            result = await provider._retry_request("http://test.com", json={"q": 1})

        assert result == response
        assert client.request.call_count == 1
        assert client.request.call_args[0] == ("POST", "http://test.com")

    @pytest.mark.asyncio
    async def test_retry_request_with_retries(self, provider):
        """Test request with retries on timeout"""
        response = ok_response()
        client = mock_client(side_effect=[
            httpx.TimeoutException("Timeout"),
            httpx.TimeoutException("Timeout"),
            response
        ])

        with patch('httpx.AsyncClient', return_value=client):
            with patch('asyncio.sleep', AsyncMock()) as mock_sleep:
                result = await provider._retry_request("http://test.com")

        assert result == response
        assert client.request.call_count == 3
        assert mock_sleep.call_count == 2

    @pytest.mark.asyncio
    async def test_retry_request_max_retries_exceeded(self, provider):
        """Test request fails after max retries and is recorded"""
        client = mock_client(side_effect=httpx.TimeoutException("Timeout"))

        with patch('httpx.AsyncClient', return_value=client):
            with patch('asyncio.sleep', AsyncMock()):
                result = await provider._retry_request("http://test.com")

        assert result is None
        assert client.request.call_count == 3
        assert len(provider.failed_requests) == 1
        assert provider.failed_requests[0]['error_type'] == 'MaxRetriesError'
        assert provider.failed_requests[0]['retry_count'] == 3

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, provider):
        error_response = Mock(spec=httpx.Response)
        error_response.status_code = 503
        error_response.raise_for_status = Mock(side_effect=httpx.HTTPStatusError(
            "Service Unavailable", request=Mock(), response=error_response
        ))
        response = ok_response()
        client = mock_client(side_effect=[error_response, response])

        with patch('httpx.AsyncClient', return_value=client):
            with patch('asyncio.sleep', AsyncMock()):
                result = await provider._retry_request("http://test.com")

        assert result == response
        assert client.request.call_count == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, provider):
        """Test 4xx responses fail immediately"""
        error_response = Mock(spec=httpx.Response)
        error_response.status_code = 401
        error_response.raise_for_status = Mock(side_effect=httpx.HTTPStatusError(
            "Unauthorized", request=Mock(), response=error_response
        ))
        client = mock_client(return_value=error_response)

        with patch('httpx.AsyncClient', return_value=client):
            result = await provider._retry_request("http://test.com")

        assert result is None
        assert client.request.call_count == 1
        assert provider.failed_requests[0]['error_type'] == 'HTTPStatusError'

    @pytest.mark.asyncio
    async def test_rate_limit_honours_retry_after(self, provider):
        limited = Mock(spec=httpx.Response)
        limited.status_code = 429
        limited.headers = {'Retry-After': '2'}
        response = ok_response()
        client = mock_client(side_effect=[limited, response])

        with patch('httpx.AsyncClient', return_value=client):
            with patch('asyncio.sleep', AsyncMock()) as mock_sleep:
                result = await provider._retry_request("http://test.com")

        assert result == response
        mock_sleep.assert_called_once_with(2)

    def test_get_failed_requests(self, provider):
        """Test converting failures into PipelineError records"""
        provider._record_failed_request("http://test.com", "Boom", "TestError", 2)

        errors = provider.get_failed_requests("run-1")

        assert len(errors) == 1
        assert isinstance(errors[0], PipelineError)
        assert errors[0].run_id == "run-1"
        assert errors[0].source == "test_source"
        assert errors[0].context == "http://test.com"
        assert errors[0].retry_count == 2

        provider.clear_failed_requests()
        assert provider.get_failed_requests() == []


class TestDataForSEOProvider:
    """Test keyword volume lookups"""

    @pytest.mark.parametrize("score,level", [
        (0.0, "low"), (0.29, "low"), (0.3, "medium"), (0.59, "medium"),
        (0.6, "high"), (0.79, "high"), (0.8, "very_high"), (1.0, "very_high"),
    ])
    def test_competition_buckets(self, score, level):
        assert competition_level_from_score(score) == level

    def test_mock_data_is_deterministic(self):
        first = mock_keyword_data(["air quality app", "pollution tracker"])
        second = mock_keyword_data(["air quality app", "pollution tracker"])

        assert [k.model_dump() for k in first] == [k.model_dump() for k in second]
        assert first[0].intent == "transactional"
        assert first[1].intent == "informational"
        for item in first:
            assert 10000 <= item.monthly_volume < 60000
            assert 0.5 <= item.cpc <= 5.5
            assert 0 <= item.competition < 1

    def test_mock_data_values(self):
        # "a" has code 97
        data = mock_keyword_data(["a"])[0]

        assert data.monthly_volume == 10097
        assert data.cpc == 1.47
        assert data.competition == 0.97
        assert data.competition_level == "very_high"

    @pytest.mark.asyncio
    async def test_unconfigured_uses_mock_data(self):
        provider = DataForSEOProvider(login="", password="")

        with patch.object(provider, '_retry_request', AsyncMock()) as mock_request:
            data = await provider.get_keyword_volume(["air quality app"])

        mock_request.assert_not_called()
        assert data[0].keyword == "air quality app"

    @pytest.mark.asyncio
    async def test_empty_keywords(self):
        provider = DataForSEOProvider(login="user", password="pass")
        assert await provider.get_keyword_volume([]) == []

    @pytest.mark.asyncio
    async def test_live_response_is_parsed(self):
        provider = DataForSEOProvider(login="user", password="pass")
        payload = {
            "tasks": [{
                "result": [
                    {"keyword": "async standup", "search_volume": 24000, "cpc": 3.1, "competition": 0.25},
                    {"keyword": "standup app", "search_volume": 8000, "cpc": None, "competition": 0.65},
                ]
            }]
        }

        with patch.object(provider, '_retry_request', AsyncMock(return_value=ok_response(payload))) as mock_request:
            data = await provider.get_keyword_volume(["async standup", "standup app"])

        assert [(k.keyword, k.monthly_volume, k.competition_level) for k in data] == [
            ("async standup", 24000, "low"),
            ("standup app", 8000, "high"),
        ]
        assert data[1].cpc == 0
        kwargs = mock_request.call_args[1]
        assert kwargs['auth'] == ("user", "pass")
        assert kwargs['json'][0]['location_code'] == 2840

    def test_payload_caps_keywords(self):
        provider = DataForSEOProvider(login="user", password="pass")
        payload = provider._build_payload([f"kw{i}" for i in range(8)])
        assert len(payload[0]['keywords']) == 5

    @pytest.mark.asyncio
    async def test_failed_request_uses_mock_data(self):
        provider = DataForSEOProvider(login="user", password="pass")

        with patch.object(provider, '_retry_request', AsyncMock(return_value=None)):
            data = await provider.get_keyword_volume(["async standup"])

        assert data == mock_keyword_data(["async standup"])

    @pytest.mark.asyncio
    async def test_get_best_keyword(self):
        provider = DataForSEOProvider(login="user", password="pass")
        data = [
            KeywordData(keyword="small", monthly_volume=1000),
            KeywordData(keyword="big", monthly_volume=90000),
            KeywordData(keyword="medium", monthly_volume=20000),
        ]

        with patch.object(provider, 'get_keyword_volume', AsyncMock(return_value=data)):
            best = await provider.get_best_keyword(["small", "big", "medium"])

        assert best.keyword == "big"

    @pytest.mark.asyncio
    async def test_get_best_keyword_requires_keywords(self):
        provider = DataForSEOProvider(login="", password="")

        with pytest.raises(ValueError, match="At least one keyword is required"):
            await provider.get_best_keyword([])


class TestTavilyProvider:
    """Test demand research"""

    def test_research_queries(self):
        queries = research_queries("AsyncStandup", ["async standup"])

        assert len(queries) == 4
        assert queries[0] == "AsyncStandup complaints reddit"
        assert queries[1] == "async standup alternatives problems"

    def test_research_queries_without_keywords(self):
        assert research_queries("AsyncStandup", [])[1] == "AsyncStandup alternatives problems"

    @pytest.mark.asyncio
    async def test_unconfigured_research_uses_mock(self):
        provider = TavilyProvider(api_key="")

        research = await provider.research_idea("AsyncStandup", ["async standup"])

        assert len(research) == 4
        assert all(len(result.snippets) == 5 for result in research)
        assert research[0].query == "AsyncStandup complaints reddit"

    @pytest.mark.asyncio
    async def test_search_parses_results(self):
        provider = TavilyProvider(api_key="tvly-test")
        payload = {"results": [
            {"content": "Standups are painful", "url": "https://reddit.com/1"},
            {"content": None, "url": "https://x.com/2"},
        ]}

        with patch.object(provider, '_retry_request', AsyncMock(return_value=ok_response(payload))) as mock_request:
            result = await provider.search("standups")

        assert result.snippets == ["Standups are painful"]
        assert result.sources == ["https://reddit.com/1", "https://x.com/2"]
        assert mock_request.call_args[1]['json']['api_key'] == "tvly-test"

    @pytest.mark.asyncio
    async def test_failed_query_is_replaced_with_mock(self):
        provider = TavilyProvider(api_key="tvly-test")
        good = mock_research_result("ok")
        side_effect = [good, Exception("boom"), good, good]

        with patch.object(provider, 'search', AsyncMock(side_effect=side_effect)):
            research = await provider.research_idea("AsyncStandup", ["async standup"])

        assert len(research) == 4
        assert research[1].query == "async standup alternatives problems"
