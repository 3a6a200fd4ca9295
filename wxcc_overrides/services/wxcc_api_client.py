"""
WxCC Overrides API client

Endpoints (WxCC Overrides API):
- GET /organization/{org-id}/v2/overrides        list containers (no overrides)
- GET /organization/{org-id}/overrides/{id}      one container with its overrides
- PUT /organization/{org-id}/overrides/{id}      replace the whole container

Reads are retried with exponential backoff on transient failures. The PUT
is never retried: a half-applied whole-container write must not be resent.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..domain.overrides.schemas import WxccContainerPayload, WxccOverrideContainer
from ..errors import UpstreamReadFailed, UpstreamWriteFailed
from ..logging_config import log_api_call, log_wxcc_api_error

logger = logging.getLogger(__name__)

MAX_RETRY_WAIT_SECONDS = 30


def is_transient(exc: BaseException) -> bool:
    """Network trouble, rate limiting and 5xx are worth another attempt"""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class WxccApiClient:
    """Async client for the WxCC Overrides API"""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        organization_id: str,
        timeout_ms: int = 30000,
        retry_attempts: int = 3,
        retry_delay_ms: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.organization_id = organization_id
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay_ms / 1000
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_ms / 1000,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            transport=transport,
            event_hooks={"request": [self._on_request], "response": [self._on_response]},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Call logging
    # ------------------------------------------------------------------

    async def _on_request(self, request: httpx.Request) -> None:
        request.extensions["wxcc_started"] = time.monotonic()
        logger.info(
            f"📡 WxCC API Call Starting: {request.method} {request.url}",
            extra={"type": "wxcc_api_call_start", "method": request.method, "fullUrl": str(request.url)},
        )

    async def _on_response(self, response: httpx.Response) -> None:
        request = response.request
        started = request.extensions.get("wxcc_started")
        duration_ms = round((time.monotonic() - started) * 1000, 1) if started is not None else None
        log_api_call(request.method, str(request.url), duration_ms, response.status_code)

    def _container_path(self, container_id: str) -> str:
        return f"/organization/{self.organization_id}/overrides/{container_id}"

    async def _get_with_retry(self, path: str, operation: str) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_delay, max=MAX_RETRY_WAIT_SECONDS),
            retry=retry_if_exception(is_transient),
            before_sleep=lambda state: logger.warning(
                f"⚠️ {operation} failed, retrying (attempt {state.attempt_number}/{self.retry_attempts}): "
                f"{state.outcome.exception()}"
            ),
            sleep=asyncio.sleep,
            reraise=True,
        ):
            with attempt:
                response = await self.client.get(path)
                response.raise_for_status()
                return response.json()

    # ------------------------------------------------------------------
    # Overrides API
    # ------------------------------------------------------------------

    async def list_override_containers(self) -> list[WxccOverrideContainer]:
        """List all override containers (basic info only)"""
        path = f"/organization/{self.organization_id}/v2/overrides"
        try:
            data = await self._get_with_retry(path, "list_containers")
            containers = [WxccOverrideContainer.model_validate(c) for c in (data or {}).get("items") or []]
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            log_wxcc_api_error("list_containers", e)
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            raise UpstreamReadFailed(f"Failed to fetch override containers: {e}", status) from e

        logger.info(f"✅ Fetched {len(containers)} override containers")
        return containers

    async def get_override_container(self, container_id: str) -> WxccOverrideContainer:
        """Get a container with its overrides"""
        try:
            data = await self._get_with_retry(self._container_path(container_id), "get_container_by_id")
            container = WxccOverrideContainer.model_validate(data)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            log_wxcc_api_error("get_container_by_id", e, {"containerId": container_id})
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            raise UpstreamReadFailed(f"Failed to fetch container {container_id}: {e}", status) from e

        logger.info(f"📋 Container {container_id} has {len(container.overrides)} overrides")
        return container

    async def replace_override_container(
        self, container_id: str, payload: WxccContainerPayload
    ) -> WxccOverrideContainer:
        """PUT the complete container; the response is the authoritative post-write state"""
        body = payload.model_dump(mode="json")
        try:
            response = await self.client.put(self._container_path(container_id), json=body)
            response.raise_for_status()
            container = WxccOverrideContainer.model_validate(response.json())
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            log_wxcc_api_error("update_override", e, {"containerId": container_id, "payload": body})
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            raise UpstreamWriteFailed(f"Failed to update container {container_id}: {e}", status) from e

        logger.info(f"✅ Replaced container {container_id} ({len(container.overrides)} overrides)")
        return container
