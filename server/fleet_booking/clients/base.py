"""Shared httpx plumbing for collaborator service clients."""

import time
from typing import Any, Optional

import httpx

from ..core.observability import metrics_collector
from .interfaces import AdapterError


class BaseClient:
    """Async JSON client bound to one collaborator service."""

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send a request and return the response, whatever its status code.

        Transport failures and timeouts surface as AdapterError so callers
        only deal with one failure type.
        """
        started = time.perf_counter()
        outcome = "error"
        try:
            response = await self.client.request(method, path, json=json, params=params)
            outcome = str(response.status_code)
            return response
        except httpx.TimeoutException as e:
            outcome = "timeout"
            raise AdapterError(self.service_name, operation, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise AdapterError(self.service_name, operation, str(e) or e.__class__.__name__) from e
        finally:
            metrics_collector.record_adapter_call(
                service=self.service_name,
                operation=operation,
                outcome=outcome,
                duration=time.perf_counter() - started,
            )

    def _json(self, operation: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(self.service_name, operation, "response is not JSON") from e
        if not isinstance(data, dict):
            raise AdapterError(self.service_name, operation, "unexpected response shape")
        return data
