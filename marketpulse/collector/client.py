"""
DataForSEO API Client

Async HTTP client with:
- Connection pooling
- Automatic retry with exponential backoff
- Graceful error handling
- Request/response logging
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


def task_results(response: Dict) -> List[Dict[str, Any]]:
    """
    Safely extract the result list of the first task in a DataForSEO response.

    Handles cases where tasks or result is None, empty, or malformed.

    Args:
        response: Raw API response dict

    Returns:
        List of result objects, empty list on failure
    """
    try:
        tasks = response.get("tasks")
        if not tasks or not isinstance(tasks, list):
            return []

        result = tasks[0].get("result")
        if not result or not isinstance(result, list):
            return []

        return [r for r in result if isinstance(r, dict)]
    except (AttributeError, TypeError, IndexError, KeyError) as e:
        logger.debug(f"Safe result extraction failed: {e}")
        return []


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)


class DataForSEOError(Exception):
    """Raised when a DataForSEO request fails at the HTTP or API level."""
    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class DataForSEOClient:
    """
    Async client for DataForSEO API.

    Usage:
        async with DataForSEOClient(login="your_login", password="your_password") as client:
            result = await client.post("keywords_data/google_ads/search_volume/live", [{
                "location_code": 2528,
                "language_code": "nl",
                "keywords": ["holland casino"],
            }])
    """

    BASE_URL = "https://api.dataforseo.com/v3"

    def __init__(
        self,
        login: str,
        password: str,
        retry_config: Optional[RetryConfig] = None,
        max_connections: int = 10,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize DataForSEO client.

        Args:
            login: DataForSEO login email
            password: DataForSEO API password
            retry_config: Retry configuration (optional)
            max_connections: Maximum concurrent connections
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.login = login
        self.retry_config = retry_config or RetryConfig()

        credentials = f"{login}:{password}"
        auth_token = base64.b64encode(credentials.encode()).decode()

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Basic {auth_token}",
                "Content-Type": "application/json",
            },
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

        self._closed = False

    async def post(
        self,
        endpoint: str,
        data: List[Dict[str, Any]],
        retry: bool = True,
    ) -> Dict[str, Any]:
        """
        Make POST request to DataForSEO API.

        Args:
            endpoint: API endpoint path (e.g., "keywords_data/google_ads/search_volume/live")
            data: Request payload (list of task objects)
            retry: Whether to retry on failure

        Returns:
            API response as dictionary

        Raises:
            DataForSEOError: On API error
        """
        return await self._send("POST", endpoint, data, retry)

    async def get(self, endpoint: str, retry: bool = True) -> Dict[str, Any]:
        """Make GET request to DataForSEO API (account/appendix endpoints)."""
        return await self._send("GET", endpoint, None, retry)

    async def _send(
        self,
        method: str,
        endpoint: str,
        data: Optional[List[Dict]],
        retry: bool,
    ) -> Dict[str, Any]:
        if self._closed:
            raise DataForSEOError("Client is closed")

        url = f"/{endpoint}"

        if retry:
            return await self._request_with_retry(method, url, data)
        return await self._make_request(method, url, data)

    async def _make_request(self, method: str, url: str, data: Optional[List[Dict]]) -> Dict[str, Any]:
        """Make a single HTTP request."""
        logger.debug(f"{method} {url}")

        if method == "POST":
            response = await self._client.post(url, json=data)
        else:
            response = await self._client.get(url)

        if response.status_code != 200:
            raise DataForSEOError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
                response=_json_or_none(response),
            )

        try:
            result = response.json()
        except ValueError as e:
            raise DataForSEOError(f"Invalid JSON in API response: {e}") from e

        if not isinstance(result, dict):
            raise DataForSEOError(
                f"Unexpected API response type: {type(result).__name__}",
                response={"body": result},
            )

        # Check for API-level errors
        if result.get("status_code") != 20000:
            error_msg = result.get("status_message", "Unknown error")
            raise DataForSEOError(
                f"API error: {error_msg}",
                status_code=result.get("status_code"),
                response=result,
            )

        for task in result.get("tasks") or []:
            task_status = task.get("status_code")
            if task_status not in (20000, 20100):
                logger.error(
                    f"DataForSEO task error in {url}: {task.get('status_message', 'Task error')} "
                    f"(status: {task_status})"
                )

        return result

    async def _request_with_retry(self, method: str, url: str, data: Optional[List[Dict]]) -> Dict[str, Any]:
        """Make request with automatic retry on failure."""
        last_exception = None
        delay = self.retry_config.initial_delay

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await self._make_request(method, url, data)

            except DataForSEOError as e:
                last_exception = e

                # Don't retry client errors (4xx except 429)
                if e.status_code and 400 <= e.status_code < 500 and e.status_code != 429:
                    raise

            except httpx.TimeoutException as e:
                last_exception = DataForSEOError(f"Request timed out: {e}")

            except httpx.HTTPError as e:
                last_exception = DataForSEOError(f"HTTP error: {e}")

            if attempt < self.retry_config.max_retries:
                logger.warning(
                    f"Request to {url} failed (attempt {attempt + 1}/{self.retry_config.max_retries + 1}): "
                    f"{last_exception}. Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
                delay = min(
                    delay * self.retry_config.exponential_base,
                    self.retry_config.max_delay,
                )

        raise last_exception

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _json_or_none(response: httpx.Response) -> Optional[dict]:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
