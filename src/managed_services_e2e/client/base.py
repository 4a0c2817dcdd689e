"""Async REST client base shared by the control plane APIs."""

from __future__ import annotations

from typing import Any, Self

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from managed_services_e2e.client.errors import is_transient, raise_for_api_status
from managed_services_e2e.config.models import ApiConfig

logger = structlog.get_logger()

# POST creates are sent exactly once.
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class ApiClient:
    """Thin async wrapper around one control plane REST API.

    Transport failures and gateway errors are retried for idempotent methods;
    every other non-2xx response is raised as a classified ApiError.
    """

    def __init__(self, base_url: str, config: ApiConfig | None = None) -> None:
        self._config = config or ApiConfig()
        headers = {"Accept": "application/json"}
        token = self._config.token
        if token is not None and token.get_secret_value():
            headers["Authorization"] = f"Bearer {token.get_secret_value()}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded body (None when empty)."""
        attempts = (
            self._config.retry_max_attempts if method.upper() in IDEMPOTENT_METHODS else 1
        )
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self._config.retry_wait_seconds, max=30),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                resp = await self._client.request(method, path, params=params, json=json)
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "api.retried",
                        method=method,
                        path=path,
                        attempt=attempt.retry_state.attempt_number,
                    )
                raise_for_api_status(resp)
        if not resp.content:
            return None
        return resp.json()
