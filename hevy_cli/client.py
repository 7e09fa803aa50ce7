"""Async client for the Hevy public API."""

import logging
from typing import Any, Optional, Union

import httpx

from hevy_cli.exceptions import HevyAPIError

DEFAULT_BASE_URL = "https://api.hevy.com/v1"

# Envelope keys probed, in order, when a list endpoint does not return a bare list
LIST_KEYS = ("data", "items", "workouts", "exercises", "routines")

QueryValue = Union[str, int, float, bool, None]

_LOGGER = logging.getLogger(__name__)


def get_list(response: Any) -> list:
    """Extract the list of records from a list-endpoint response.

    Accepts a bare list or an object carrying the list under one of
    ``LIST_KEYS``; a key whose value is not a list is skipped. Anything else
    yields an empty list.
    """
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        for key in LIST_KEYS:
            value = response.get(key)
            if isinstance(value, list):
                return value
    return []


def get_count(response: Any) -> Any:
    """Return the ``count`` field of a count response, or the raw body without one."""
    if isinstance(response, dict) and response.get("count") is not None:
        return response["count"]
    # Unverified against the API: fall back to whatever came back
    return response


class HevyClient:
    """Client for read-only Hevy API endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Hevy API key, sent in the ``api-key`` header
            base_url: API root; defaults to the public Hevy API
            transport: Custom httpx transport (used by tests)
        """
        self.api_key = api_key
        self.base_url = base_url or DEFAULT_BASE_URL
        self._http = httpx.AsyncClient(transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._http.aclose()

    def _get_headers(self) -> dict:
        return {
            "api-key": self.api_key,
            "Accept": "application/json",
        }

    @staticmethod
    def _clean_query(query: Optional[dict[str, QueryValue]]) -> dict[str, QueryValue]:
        """Drop parameters without a value so they are never sent."""
        if not query:
            return {}
        return {key: value for key, value in query.items() if value is not None}

    async def get(self, path: str, query: Optional[dict[str, QueryValue]] = None) -> Any:
        """GET ``path`` and return the decoded body.

        JSON responses are parsed; any other content type is returned as text.
        Non-2xx statuses raise :class:`HevyAPIError`. Network failures surface
        as ``httpx.TransportError``.
        """
        url = self.base_url + path
        params = self._clean_query(query)
        _LOGGER.debug("GET %s params=%s", url, params)

        response = await self._http.get(url, params=params, headers=self._get_headers())

        is_json = "application/json" in response.headers.get("content-type", "")
        body = response.json() if is_json else response.text
        _LOGGER.debug("Response %s from %s", response.status_code, url)

        if not response.is_success:
            if is_json and isinstance(body, dict) and "message" in body:
                detail = str(body["message"])
            else:
                detail = response.reason_phrase
            raise HevyAPIError(response.status_code, detail)

        return body
