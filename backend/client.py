"""
HTTP client for the booking API.
Serves slot availability and booking creation for the booking wizard.
"""

import asyncio
from datetime import date
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx

from booking.ports import AuthPort, AvailabilityPort, BookingPort
from models.booking import BookingRequest
from utils.exceptions import BackendError
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level="INFO", log_file="backend.log", log_dir="logs"
)

# Retry configuration
_MAX_RETRIES = 3
_RETRY_DELAY = 1.0  # seconds
_RETRY_BACKOFF = 2.0  # exponential backoff multiplier
_API_TIMEOUT = 30.0  # seconds


def _error_message(response: httpx.Response) -> str:
    """Best available error description from an error response."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error", "title"):
            if data.get(key):
                return str(data[key])
    text = response.text.strip()
    return text[:200] if text else f"HTTP {response.status_code} {response.reason_phrase}"


class BackendClient(AvailabilityPort, BookingPort):
    """Client for the booking REST API."""

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthPort] = None,
        timeout: float = _API_TIMEOUT,
        max_retries: int = _MAX_RETRIES,
        retry_delay: float = _RETRY_DELAY,
        retry_backoff: float = _RETRY_BACKOFF,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. http://localhost:5224/api
            auth: Authentication capability providing the bearer token
            timeout: Per-request timeout in seconds
            max_retries: Attempts per request (including the first)
            retry_delay: Initial delay between attempts in seconds
            retry_backoff: Multiplier applied to the delay after each attempt
            transport: Optional httpx transport (used by tests)
        """
        self._auth = auth
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._retry_backoff = retry_backoff
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings,
        auth: Optional[AuthPort] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BackendClient":
        return cls(
            settings.api_base_url,
            auth=auth,
            timeout=settings.api_timeout_seconds,
            max_retries=settings.api_max_retries,
            retry_delay=settings.api_retry_delay_seconds,
            retry_backoff=settings.api_retry_backoff,
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ========== Capabilities ==========

    async def get_available_slots(
        self, provider_id: str, day: date
    ) -> List[Union[str, Dict[str, Any]]]:
        """
        Get bookable start times for a provider on a date.

        Args:
            provider_id: Provider ID
            day: Date to check

        Returns:
            "HH:MM" strings or slot objects as returned by the API

        Raises:
            ValueError: If provider_id is empty
            BackendError: If the request fails after retries
        """
        if not provider_id:
            raise ValueError("Provider ID is required")

        response = await self._request(
            "GET",
            f"/bookings/availability/{quote(provider_id, safe='')}",
            retry_server_errors=True,
            params={"date": day.isoformat()},
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise BackendError("Unexpected availability response", response.status_code)
        return data

    async def get_available_days(
        self, provider_id: str, service_id: int, start: date, days_count: int
    ) -> List[Dict[str, Any]]:
        """
        Get the provider's working days in a booking window.

        Args:
            provider_id: Provider ID
            service_id: Service ID
            start: First date of the window
            days_count: Number of days in the window

        Returns:
            Day objects with date, dayOfWeek, isAvailable and workingHours

        Raises:
            ValueError: If provider_id is empty
            BackendError: If the request fails after retries
        """
        if not provider_id:
            raise ValueError("Provider ID is required")

        response = await self._request(
            "GET",
            "/booking/available-days",
            retry_server_errors=True,
            params={
                "providerId": provider_id,
                "serviceId": str(service_id),
                "startDate": start.isoformat(),
                "daysCount": str(days_count),
            },
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise BackendError("Unexpected available days response", response.status_code)
        return data

    async def create_booking(self, request: BookingRequest) -> Dict[str, Any]:
        """
        Create a booking.

        Only retried when the request never reached the server, so a
        booking is never created twice by the retry loop.

        Raises:
            BackendError: If the booking could not be created
        """
        response = await self._request(
            "POST",
            "/bookings",
            retry_server_errors=False,
            json=request.to_payload(),
        )
        data = self._json(response)
        if not isinstance(data, dict):
            raise BackendError("Unexpected booking response", response.status_code)
        return data

    # ========== Transport ==========

    def _headers(self) -> Dict[str, str]:
        token = self._auth.access_token if self._auth else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError("Invalid JSON in response", response.status_code) from e

    async def _request(
        self,
        method: str,
        url: str,
        *,
        retry_server_errors: bool,
        **kwargs: Any,
    ) -> httpx.Response:
        delay = self._retry_delay

        for attempt in range(self._max_retries):
            final = attempt == self._max_retries - 1
            try:
                response = await self.client.request(
                    method, url, headers=self._headers(), **kwargs
                )
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                message = _error_message(e.response)
                # Don't retry on client errors (4xx)
                if status < 500 or not retry_server_errors or final:
                    logger.error(f"{method} {url} failed with HTTP {status}: {message}")
                    raise BackendError(message, status) from e
                logger.warning(
                    f"HTTP {status} (attempt {attempt + 1}/{self._max_retries}) "
                    f"for {method} {url}. Retrying in {delay}s..."
                )

            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                # The request never reached the server, safe to retry
                if final:
                    logger.error(
                        f"Could not reach booking API for {method} {url} "
                        f"after {self._max_retries} attempts: {e}"
                    )
                    raise BackendError(f"Unable to reach the booking service: {e}") from e
                logger.warning(
                    f"Connection error (attempt {attempt + 1}/{self._max_retries}) "
                    f"for {method} {url}: {e}. Retrying in {delay}s..."
                )

            except httpx.RequestError as e:
                if not retry_server_errors or final:
                    logger.error(f"Request error for {method} {url}: {e}", exc_info=True)
                    raise BackendError(f"Request to the booking service failed: {e}") from e
                logger.warning(
                    f"Request error (attempt {attempt + 1}/{self._max_retries}) "
                    f"for {method} {url}: {e}. Retrying in {delay}s..."
                )

            await asyncio.sleep(delay)
            delay *= self._retry_backoff

        # Should never reach here, but satisfy type checker
        raise BackendError(f"{method} {url} failed")
