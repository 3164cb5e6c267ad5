"""HTTP transport for control plane API calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from photonctl.config.models import RetryConfig
from photonctl.errors import APIError, RequestError
from photonctl.http.retry import RetryPolicy

logger = logging.getLogger(__name__)

RequestParams = Mapping[str, str | int | float | bool]


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """Extract ``(code, message)`` from a control plane error body, if it has one."""

    try:
        decoded = response.json()
    except ValueError:
        return None, None
    if not isinstance(decoded, dict):
        return None, None
    code = decoded.get("code")
    message = decoded.get("message")
    return (
        str(code) if code else None,
        str(message) if message else None,
    )


class PhotonTransport:
    """Async transport handling retries and bearer-token headers."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float,
        verify_tls: bool,
        retry_config: RetryConfig,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.retry = RetryPolicy(retry_config, sleep=sleep)
        self._token = token
        self._owns_http_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            verify=verify_tls,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._client.aclose()

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: RequestParams | None = None,
        json_data: Mapping[str, Any] | None = None,
    ) -> Any:
        method_upper = method.upper()
        attempts = self.retry.attempts

        headers: dict[str, str] = {"Accept": "application/json"}
        if json_data is not None:
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        query = {key: value for key, value in params.items() if value not in (None, "")} if params else None

        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(
                    method_upper,
                    path,
                    params=query,
                    json=dict(json_data) if json_data is not None else None,
                    headers=headers,
                )
            except httpx.HTTPError as exc:
                if self.retry.should_retry_exception(exc) and attempt < attempts:
                    logger.warning(
                        "%s %s failed (%s), retrying (attempt %d/%d)",
                        method_upper,
                        path,
                        exc,
                        attempt,
                        attempts,
                    )
                    await self.retry.wait(attempt)
                    continue
                raise RequestError(f"request failed after retries: {exc}") from exc

            if response.status_code == 429 or response.status_code >= 500:
                if self.retry.should_retry_status(response.status_code) and attempt < attempts:
                    logger.warning(
                        "%s %s returned HTTP %d, retrying (attempt %d/%d)",
                        method_upper,
                        path,
                        response.status_code,
                        attempt,
                        attempts,
                    )
                    await self.retry.wait(attempt, response=response)
                    continue
                code, message = _error_details(response)
                raise APIError(
                    status_code=response.status_code,
                    message=message or "transient upstream error",
                    body=None if message else (response.text.strip() or None),
                    code=code,
                )

            if response.status_code >= 400:
                code, message = _error_details(response)
                raise APIError(
                    status_code=response.status_code,
                    message=message or "request failed",
                    body=None if message else (response.text.strip() or None),
                    code=code,
                )

            logger.debug("%s %s -> HTTP %d", method_upper, path, response.status_code)
            if response.status_code == 204 or not response.text.strip():
                return {}

            try:
                return response.json()
            except ValueError as exc:
                raise RequestError("response was not valid JSON") from exc

        raise RequestError("request failed without a captured error")
