"""
AI service for generating product ideas using Grok through the OpenAI-compatible xAI API
"""
import json
import asyncio
from datetime import date
from typing import Dict, List, Optional, Any
import openai
from openai import AsyncOpenAI
from app.config import settings
from app.logging_config import logger
from app.models import RawIdea

MAX_RAW_IDEAS = 15


class LLMResponseError(ValueError):
    """Raised when a model response cannot be parsed into the expected shape"""

    def __init__(self, message: str, content: Optional[str] = None):
        super().__init__(message)
        self.content = content


IDEA_GENERATION_PROMPT = """You are an expert product strategist and market researcher. Generate 12-18 novel, profitable software product ideas focused on current macro trends.

TRENDS TO FOCUS ON:
- AI agents and autonomous systems
- Spatial computing applications
- Climate tech and sustainability software
- Neurotech and health optimization
- Remote work and async collaboration tools
- Creator economy platforms
- Privacy-first alternatives to mainstream apps

CONSTRAINTS:
- Ideas must be buildable by a solo indie developer or small team
- Software-only (no hardware required)
- Estimated development cost < $100k
- Clear monetization path
- Solve real pain points (not imaginary problems)

OUTPUT FORMAT:
Return a JSON object {{"ideas": [...]}} where each idea has this structure:
{{
  "name": "Product Name",
  "one_liner": "Brief description of what it does and who it's for",
  "suspected_platform": "mobile-first|web|desktop|browser-extension",
  "primary_keywords": ["keyword1", "keyword2", "keyword3"]
}}

Today's date: {current_date}

Generate 15 high-potential ideas now."""


def get_mock_ideas() -> List[RawIdea]:
    """Fallback raw ideas for development and API outages"""
    return [
        RawIdea(
            name="AirQuality Pro",
            one_liner="Real-time air quality monitoring app with personalized health recommendations for people with respiratory conditions",
            suspected_platform="mobile-first",
            primary_keywords=["air quality app", "pollution tracker", "health monitoring"]
        ),
        RawIdea(
            name="AsyncStandup",
            one_liner="Video-based async standup tool for remote teams with automatic transcription and action item extraction",
            suspected_platform="web",
            primary_keywords=["async standup", "remote team tools", "video standups"]
        ),
        RawIdea(
            name="CreatorInvoice",
            one_liner="Automated invoicing and contract management for content creators and freelancers",
            suspected_platform="web",
            primary_keywords=["creator invoicing", "freelance invoices", "contract management"]
        ),
        RawIdea(
            name="TabTamer",
            one_liner="Browser extension that groups, snoozes and summarizes open tabs for researchers",
            suspected_platform="browser-extension",
            primary_keywords=["tab manager", "tab organizer extension", "research tabs"]
        ),
        RawIdea(
            name="LocalFirst CRM",
            one_liner="Privacy-first CRM that stores all data locally with optional E2E encrypted sync",
            suspected_platform="desktop",
            primary_keywords=["privacy crm", "local first software", "encrypted crm"]
        )
    ]


class AIService:
    """Service for JSON chat completions against Grok"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None
    ):
        """
        Initialize AI service

        Args:
            api_key: xAI API key (uses settings if not provided)
            base_url: OpenAI-compatible endpoint (uses settings if not provided)
            model: Chat model name (uses settings if not provided)
        """
        self.api_key = api_key or settings.XAI_API_KEY
        if not self.api_key:
            raise ValueError("xAI API key is required")

        self.base_url = base_url or settings.XAI_BASE_URL
        self.model = model or settings.XAI_MODEL
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        self.total_tokens_used = 0

        logger.info(f"AI service initialized with {self.model}")

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Run a chat completion that must answer with a JSON object

        Args:
            system_prompt: System message
            user_prompt: User message
            temperature: Sampling temperature
            max_tokens: Optional completion token limit

        Returns:
            Parsed JSON object

        Raises:
            LLMResponseError: If the response is empty or not a JSON object
            openai.APIError: If the API call fails
        """
        response = await self._call_api(system_prompt, user_prompt, temperature, max_tokens)

        tokens_used = response.usage.total_tokens if response.usage else 0
        self.total_tokens_used += tokens_used
        logger.debug(f"Completion received, tokens used: {tokens_used}")

        return self._parse_response(response)

    async def _call_api(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: Optional[int]
    ) -> Any:
        """
        Make API call to the chat completions endpoint

        Returns:
            OpenAI response object
        """
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": temperature,
            "response_format": {"type": "json_object"}
        }
        if max_tokens:
            params["max_tokens"] = max_tokens

        try:
            return await self.client.chat.completions.create(**params)

        except openai.RateLimitError as e:
            logger.warning(f"xAI rate limit hit: {str(e)}")
            await asyncio.sleep(60)
            raise

        except openai.APIError as e:
            logger.error(f"xAI API error: {str(e)}")
            raise

    def _parse_response(self, response: Any) -> Dict[str, Any]:
        """
        Extract and decode the JSON object from a completion

        Raises:
            LLMResponseError: If content is missing, invalid JSON or not an object
        """
        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise LLMResponseError("Empty response from model")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in model response: {str(e)}")
            raise LLMResponseError(f"Invalid JSON response: {str(e)}", content)

        if not isinstance(data, dict):
            raise LLMResponseError("Expected a JSON object", content)

        return data

    def parse_raw_ideas(self, payload: Dict[str, Any]) -> List[RawIdea]:
        """
        Validate the idea-generation payload

        Args:
            payload: Decoded model response

        Returns:
            At most MAX_RAW_IDEAS raw ideas

        Raises:
            LLMResponseError: If no list of ideas is present or an idea is malformed
        """
        items = payload.get("ideas") or payload.get("data")
        if not isinstance(items, list) or not items:
            raise LLMResponseError("Response does not contain a list of ideas")

        ideas = []
        for position, item in enumerate(items[:MAX_RAW_IDEAS], start=1):
            if not isinstance(item, dict):
                raise LLMResponseError(f"Idea #{position} is not an object")

            for field in ("name", "one_liner", "suspected_platform"):
                value = item.get(field)
                if not isinstance(value, str) or not value.strip():
                    raise LLMResponseError(f"Idea #{position} is missing required field: {field}")

            keywords = item.get("primary_keywords")
            if isinstance(keywords, list):
                keywords = [k.strip() for k in keywords if isinstance(k, str) and k.strip()]
            if not isinstance(keywords, list) or not keywords:
                raise LLMResponseError(f"Idea #{position} has no primary keywords")

            ideas.append(RawIdea(
                name=item["name"].strip(),
                one_liner=item["one_liner"].strip(),
                suspected_platform=item["suspected_platform"].strip(),
                primary_keywords=keywords
            ))

        return ideas

    async def generate_raw_ideas(self) -> List[RawIdea]:
        """
        Generate raw product ideas

        Returns:
            Raw ideas, or the mock list if the call or parse fails
        """
        system_prompt = IDEA_GENERATION_PROMPT.format(current_date=date.today().isoformat())

        try:
            payload = await self.complete_json(
                system_prompt,
                "Generate 15 validated product ideas.",
                temperature=0.8
            )
            ideas = self.parse_raw_ideas(payload)
            logger.info(f"Generated {len(ideas)} raw ideas")
            return ideas

        except Exception as e:
            logger.error(f"Error generating ideas, using mock ideas: {str(e)}")
            return get_mock_ideas()

    def reset_token_counter(self):
        """Reset the total token usage counter"""
        self.total_tokens_used = 0
        logger.info("Token usage counter reset")
