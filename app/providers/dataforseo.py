"""
DataForSEO keyword search-volume provider
"""
from datetime import date, timedelta
from typing import List, Optional

import httpx

from app.config import settings
from app.logging_config import logger
from app.models import CompetitionLevel, KeywordData
from app.providers.base_provider import BaseProvider

DATAFORSEO_API_URL = "https://api.dataforseo.com/v3/keywords_data/google_ads/search_volume/live"
USA_LOCATION_CODE = 2840
MAX_KEYWORDS_PER_REQUEST = 5


def competition_level_from_score(competition: float) -> str:
    """Bucket a 0-1 competition index into a competition level"""
    if competition < 0.3:
        return CompetitionLevel.LOW.value
    if competition < 0.6:
        return CompetitionLevel.MEDIUM.value
    if competition < 0.8:
        return CompetitionLevel.HIGH.value
    return CompetitionLevel.VERY_HIGH.value


def mock_keyword_data(keywords: List[str]) -> List[KeywordData]:
    """
    Deterministic stand-in keyword data

    Values are derived from the keyword's character codes so repeated calls
    for the same keyword agree.
    """
    results = []
    for index, keyword in enumerate(keywords):
        code_sum = sum(ord(char) for char in keyword)
        volume = (code_sum % 50000) + 10000
        cpc = (code_sum % 500) / 100 + 0.5
        competition = (code_sum % 100) / 100

        results.append(KeywordData(
            keyword=keyword,
            monthly_volume=volume,
            cpc=round(cpc, 2),
            competition=round(competition, 2),
            competition_level=competition_level_from_score(competition),
            intent="transactional" if index == 0 else "informational"
        ))
    return results


class DataForSEOProvider(BaseProvider):
    """Looks up Google Ads monthly search volume and competition for keywords"""

    def __init__(
        self,
        login: Optional[str] = None,
        password: Optional[str] = None,
        **kwargs
    ):
        super().__init__("dataforseo", **kwargs)
        self.login = login if login is not None else settings.DATAFORSEO_LOGIN
        self.password = password if password is not None else settings.DATAFORSEO_PASSWORD
        self.api_url = DATAFORSEO_API_URL

    @property
    def is_configured(self) -> bool:
        return bool(self.login and self.password)

    def _build_payload(self, keywords: List[str]) -> list:
        today = date.today()
        return [{
            "keywords": keywords[:MAX_KEYWORDS_PER_REQUEST],
            "location_code": USA_LOCATION_CODE,
            "language_code": "en",
            "search_partners": False,
            "date_from": (today - timedelta(days=30)).isoformat(),
            "date_to": today.isoformat()
        }]

    def _parse_response(self, response: httpx.Response) -> List[KeywordData]:
        """
        Parse a search-volume response into keyword data

        Args:
            response: HTTP response object

        Returns:
            List of KeywordData
        """
        tasks = response.json().get("tasks") or []
        items = (tasks[0].get("result") if tasks else None) or []

        results = []
        for item in items:
            competition = item.get("competition") or 0
            annotations = item.get("keyword_annotations") or {}
            concepts = annotations.get("concepts") or []
            results.append(KeywordData(
                keyword=item["keyword"],
                monthly_volume=item.get("search_volume") or 0,
                cpc=item.get("cpc") or 0,
                competition=competition,
                competition_level=competition_level_from_score(competition),
                intent=concepts[0] if concepts and isinstance(concepts[0], str) else None
            ))
        return results

    async def get_keyword_volume(self, keywords: List[str]) -> List[KeywordData]:
        """
        Get search volume data for up to five keywords

        Args:
            keywords: Keywords to look up

        Returns:
            Keyword data, mocked when credentials are missing or the call fails
        """
        if not keywords:
            return []

        if not self.is_configured:
            logger.warning("DataForSEO credentials not set, using mock data")
            return mock_keyword_data(keywords)

        response = await self._retry_request(
            self.api_url,
            json=self._build_payload(keywords),
            auth=(self.login, self.password)
        )
        if response is None:
            return mock_keyword_data(keywords)

        try:
            return self._parse_response(response)
        except Exception as e:
            logger.error(f"Error parsing DataForSEO response: {str(e)}")
            self._record_failed_request(self.api_url, f"Parse error: {str(e)}", "ParseError")
            return mock_keyword_data(keywords)

    async def get_best_keyword(self, keywords: List[str]) -> KeywordData:
        """
        Get the keyword with the highest monthly search volume

        Args:
            keywords: Candidate keywords (at least one)

        Returns:
            KeywordData of the highest-volume keyword

        Raises:
            ValueError: If no keywords are given
        """
        if not keywords:
            raise ValueError("At least one keyword is required")

        data = await self.get_keyword_volume(keywords)
        if not data:
            return mock_keyword_data(keywords[:1])[0]
        return max(data, key=lambda item: item.monthly_volume)
