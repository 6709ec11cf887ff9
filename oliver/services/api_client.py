"""Async HTTP client for the Oliver FSRS backend.

Sessions are cookie based (``ACCESS_TOKEN`` / ``REFRESH_TOKEN``). A 401 on
any protected endpoint triggers one silent refresh followed by one retry of
the original request; concurrent 401s share a single in-flight refresh.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

import httpx
from loguru import logger

from oliver.config import settings
from oliver.utils.exceptions import (
    AUTH_FAILED_MESSAGE,
    INVALID_BODY_MESSAGE,
    STATUS_MESSAGES,
    ApiError,
    fallback_message,
)

T = TypeVar("T")

SESSION_COOKIES = ("ACCESS_TOKEN", "REFRESH_TOKEN")

# Endpoints for which a 401 is final: the auth flow itself and public listings.
NO_REFRESH_PREFIXES = (
    "/auth/login",
    "/auth/logout",
    "/auth/refresh",
    "/codetop/problems/global",
)


@dataclass
class ApiResponse(Generic[T]):
    """Parsed body plus the response headers it came with."""

    body: T
    headers: httpx.Headers
    status_code: int


def should_attempt_refresh(endpoint: str) -> bool:
    return not endpoint.startswith(NO_REFRESH_PREFIXES)


class ApiClient:
    """Thin wrapper around :class:`httpx.AsyncClient` with the backend's error contract."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        cookies: Mapping[str, str] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or str(settings.BACKEND_API_URL)).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Content-Type": "application/json"},
            cookies=dict(cookies or {}),
        )
        self._refresh_task: asyncio.Task[None] | None = None
        self.user_info: dict[str, Any] | None = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def clear_session(self) -> None:
        """Forget cached user info; the cookies themselves belong to the backend."""

        self.user_info = None

    # ------------------------------------------------------------------
    # Session refresh
    # ------------------------------------------------------------------
    async def refresh_session(self) -> None:
        """Refresh the session once, sharing the call between concurrent callers."""

        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._refresh())
            self._refresh_task = task
            task.add_done_callback(self._release_refresh)
        await task

    def _release_refresh(self, task: asyncio.Task[None]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refresh(self) -> None:
        try:
            response = await self._client.post("/auth/refresh", json={})
        except httpx.RequestError as exc:
            self.clear_session()
            raise ApiError(f"Network error: {exc}", 0) from exc

        if not response.is_success:
            self.clear_session()
            raise ApiError(f"Refresh failed: {response.status_code}", response.status_code, response)

        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("user"):
            self.user_info = data["user"]
        logger.info("Session refreshed")

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        params: Any = None,
        json_body: Any = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(method, endpoint, params=params, json=json_body)
        except httpx.RequestError as exc:
            logger.error("Backend request failed", method=method, endpoint=endpoint, error=str(exc))
            raise ApiError(f"Network error: {exc}", 0) from exc

    async def request_with_headers(
        self,
        method: str,
        endpoint: str,
        *,
        params: Any = None,
        json_body: Any = None,
    ) -> ApiResponse[Any]:
        """Send a request and return the parsed JSON body with the response headers."""

        response = await self._send(method, endpoint, params=params, json_body=json_body)

        if response.status_code == 401 and should_attempt_refresh(endpoint):
            try:
                await self.refresh_session()
            except ApiError as exc:
                logger.warning("Silent refresh failed", endpoint=endpoint, status=exc.status)
            else:
                response = await self._send(method, endpoint, params=params, json_body=json_body)

        if not response.is_success:
            raise self._error_for(response)

        return ApiResponse(
            body=self._parse_body(response),
            headers=response.headers,
            status_code=response.status_code,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Any = None,
        json_body: Any = None,
    ) -> Any:
        response = await self.request_with_headers(
            method, endpoint, params=params, json_body=json_body
        )
        return response.body

    async def get(self, endpoint: str, *, params: Any = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, *, json_body: Any = None) -> Any:
        return await self.request("POST", endpoint, json_body=json_body)

    # ------------------------------------------------------------------
    # Response handling
    # ------------------------------------------------------------------
    def _error_for(self, response: httpx.Response) -> ApiError:
        status_code = response.status_code
        if status_code == 401:
            self.clear_session()
            message = AUTH_FAILED_MESSAGE
        elif status_code in STATUS_MESSAGES:
            message = STATUS_MESSAGES[status_code]
        else:
            message = f"HTTP {status_code}: {response.reason_phrase}"
            try:
                data = response.json()
            except ValueError:
                message = fallback_message(status_code)
            else:
                if isinstance(data, dict):
                    message = data.get("message") or data.get("error") or message

        logger.warning("Backend returned error", status=status_code, url=str(response.request.url))
        return ApiError(message, status_code, response)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            return None
        try:
            return json.loads(response.content)
        except ValueError as exc:
            logger.error("Failed to parse JSON response", status=response.status_code, error=str(exc))
            raise ApiError(INVALID_BODY_MESSAGE, response.status_code, response) from exc
