"""
Abstract base provider with common HTTP client functionality
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
import asyncio
import random
import httpx
from datetime import datetime
from app.models import PipelineError
from app.logging_config import logger
from app.config import settings


class BaseProvider(ABC):
    """Abstract base class for market-data API providers"""

    def __init__(
        self,
        source_name: str,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize base provider

        Args:
            source_name: Name of the provider (e.g., 'dataforseo', 'tavily')
            max_retries: Maximum attempts per request (uses settings if not provided)
            timeout: Request timeout in seconds (uses settings if not provided)
        """
        self.source_name = source_name
        self.max_retries = max_retries or settings.MAX_RETRIES
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.failed_requests: List[Dict[str, Any]] = []
        logger.info(f"{source_name} provider initialized")

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the live API are available"""

    async def _retry_request(
        self,
        url: str,
        method: str = "POST",
        **kwargs
    ) -> Optional[httpx.Response]:
        """
        Make HTTP request with exponential backoff retry logic

        Args:
            url: URL to request
            method: HTTP method (default: POST)
            **kwargs: Additional arguments for httpx request

        Returns:
            HTTP response or None if all retries failed
        """
        retry_count = 0
        backoff_base = 1

        while retry_count < self.max_retries:
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, **kwargs)

                    if response.status_code == 429:
                        await self._handle_rate_limit(response)
                        retry_count += 1
                        continue

                    response.raise_for_status()
                    logger.debug(f"Successfully fetched {url} on attempt {retry_count + 1}")
                    return response

            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500:
                    logger.warning(f"Server error {e.response.status_code} for {url}, retrying...")
                else:
                    # Client errors are not retried
                    logger.error(f"Client error {e.response.status_code} for {url}")
                    self._record_failed_request(url, str(e), "HTTPStatusError", retry_count)
                    return None

            except httpx.TimeoutException:
                logger.warning(f"Timeout for {url}, retrying...")

            except Exception as e:
                logger.error(f"Unexpected error for {url}: {str(e)}")
                self._record_failed_request(url, str(e), type(e).__name__, retry_count)
                return None

            # Exponential backoff with jitter
            retry_count += 1
            if retry_count < self.max_retries:
                wait_time = backoff_base * (2 ** (retry_count - 1)) + random.uniform(0, 1)
                logger.debug(f"Waiting {wait_time:.2f} seconds before retry {retry_count}")
                await asyncio.sleep(wait_time)

        logger.error(f"Max retries exceeded for {url}")
        self._record_failed_request(url, "Max retries exceeded", "MaxRetriesError", retry_count)
        return None

    async def _handle_rate_limit(self, response: httpx.Response):
        """
        Wait out a rate limit response

        Args:
            response: HTTP response with 429 status
        """
        retry_after = response.headers.get('Retry-After')
        if retry_after:
            try:
                wait_time = int(retry_after)
                logger.info(f"Rate limited, waiting {wait_time} seconds as requested")
                await asyncio.sleep(wait_time)
            except ValueError:
                # Retry-After might be a date
                logger.info("Rate limited, waiting 60 seconds")
                await asyncio.sleep(60)
        else:
            logger.info("Rate limited, waiting 30 seconds")
            await asyncio.sleep(30)

    def _record_failed_request(self, url: str, error_message: str, error_type: str, retry_count: int = 0):
        """
        Record a failed request for later storage in database

        Args:
            url: Failed URL
            error_message: Error message
            error_type: Type of error
            retry_count: Attempts made before giving up
        """
        self.failed_requests.append({
            'source': self.source_name,
            'context': url,
            'error_message': error_message,
            'error_type': error_type,
            'retry_count': retry_count,
            'occurred_at': datetime.utcnow()
        })
        logger.error(f"Recorded failed request: {url} - {error_type}: {error_message}")

    def get_failed_requests(self, run_id: Optional[str] = None) -> List[PipelineError]:
        """
        Get PipelineError records for failed requests

        Args:
            run_id: Pipeline run the failures belong to

        Returns:
            List of PipelineError model instances
        """
        return [
            PipelineError(run_id=run_id, **failed)
            for failed in self.failed_requests
        ]

    def clear_failed_requests(self):
        """Forget recorded failures"""
        self.failed_requests = []
