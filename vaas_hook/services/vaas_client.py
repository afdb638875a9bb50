"""HTTP client wrapper for the VaaS control plane.

Resolves datacenters and directors, creates and deletes backends and reads the
status of queued configuration changes. Includes Prometheus metrics for request
counts and latency.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx
from pydantic import ValidationError

from vaas_hook.core.config import settings
from vaas_hook.metrics.prometheus import VAAS_LATENCY, VAAS_REQUESTS
from vaas_hook.models.schemas import DC, Backend, BackendSubmission, Task, TaskStatus

log = logging.getLogger("vaas.client")

API_PREFIX_PATH = "/api/v0.1"
API_DC_PATH = f"{API_PREFIX_PATH}/dc/"
API_DIRECTOR_PATH = f"{API_PREFIX_PATH}/director/"
API_BACKEND_PATH = f"{API_PREFIX_PATH}/backend/"


class VaasClientError(RuntimeError):
    """Raised when a VaaS request fails or returns an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class VaasClient:
    """
    Tiny HTTP client wrapper for the VaaS REST API.

    Holds an httpx.AsyncClient for connection pooling and authenticates every
    request with the VaaS ApiKey scheme.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        username: str,
        api_key: str,
        timeout_s: float = 5.0,
    ):
        """Create a client with a shared HTTPX AsyncClient and base URL."""
        self._client = client
        self._base = base_url.rstrip("/")
        self._timeout = timeout_s
        self._headers = {
            "Authorization": f"ApiKey {username}:{api_key}",
            "Accept": "application/json",
        }

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient) -> "VaasClient":
        """Construct a VaasClient using global settings."""
        return cls(
            client,
            str(settings.vaas_api_host),
            settings.vaas_username,
            settings.vaas_api_key,
            settings.request_timeout_s,
        )

    def _url(self, path: str) -> str:
        """Resolve an API path, leaving absolute URLs (task locations) as they are."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base}{path}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        expected: Iterable[int],
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        url = self._url(path)
        try:
            with VAAS_LATENCY.labels(operation=operation).time():
                resp = await self._client.request(
                    method,
                    url,
                    headers={**self._headers, **(headers or {})},
                    timeout=self._timeout,
                    **kwargs,
                )
        except httpx.HTTPError as e:
            VAAS_REQUESTS.labels(operation=operation, status="error").inc()
            raise VaasClientError(f"VaaS {operation} request to {url} failed: {e}") from e

        VAAS_REQUESTS.labels(operation=operation, status=str(resp.status_code)).inc()
        if resp.status_code not in expected:
            raise VaasClientError(
                f"VaaS {operation} on {url} returned {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> dict:
        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as e:
            raise VaasClientError(f"Invalid JSON from {resp.request.url}: {e}") from e
        if not isinstance(data, dict):
            raise VaasClientError(f"Expected a JSON object from {resp.request.url}, got {data!r}")
        return data

    async def _first_object(self, operation: str, path: str, params: dict[str, str]) -> dict:
        resp = await self._request(operation, "GET", path, expected=(200,), params=params)
        objects = self._json(resp).get("objects") or []
        if not objects:
            raise VaasClientError(f"VaaS {operation}: no object matching {params}")
        return objects[0]

    async def get_dc(self, symbol: str) -> DC:
        """Find the datacenter resource for a datacenter symbol."""
        dc = await self._first_object("get_dc", API_DC_PATH, {"symbol": symbol})
        try:
            return DC.model_validate(dc)
        except ValidationError as e:
            raise VaasClientError(f"Unexpected datacenter resource {dc}: {e}") from e

    async def find_director_id(self, name: str) -> int:
        """Find the numeric id of a director by its name."""
        director = await self._first_object("find_director", API_DIRECTOR_PATH, {"name": name})
        try:
            return int(director["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise VaasClientError(f"Director {name!r} has no usable id: {director}") from e

    async def add_backend(self, backend: Backend, async_: bool = False) -> BackendSubmission:
        """
        Create a backend.

        With ``async_`` VaaS is asked to queue the change (``Prefer:
        respond-async``) and answers 202 with the task to poll in ``Location``.
        """
        headers = {"Prefer": "respond-async"} if async_ else None
        resp = await self._request(
            "add_backend",
            "POST",
            API_BACKEND_PATH,
            expected=(202,) if async_ else (200, 201),
            headers=headers,
            json=backend.to_payload(),
        )
        data = self._json(resp)
        backend_id = data.get("id")
        if backend_id is None:
            # without an id the backend could never be deleted again
            raise VaasClientError("VaaS created backend but returned no id", status_code=resp.status_code)

        if async_:
            location = resp.headers.get("Location")
            if not location:
                raise VaasClientError("VaaS accepted backend but returned no task location")
        else:
            location = data.get("resource_uri") or ""
        return BackendSubmission(backend_id=backend_id, location=location)

    async def delete_backend(self, backend_id: int) -> None:
        """Delete a backend. A backend that is already gone counts as deleted."""
        resp = await self._request(
            "delete_backend",
            "DELETE",
            f"{API_BACKEND_PATH}{backend_id}/",
            expected=(200, 202, 204, 404),
        )
        if resp.status_code == 404:
            log.info("Backend %s already absent in VaaS", backend_id)

    async def task_status(self, task: Task) -> None:
        """Refresh ``task.status`` and ``task.info`` from VaaS."""
        resp = await self._request("task_status", "GET", task.resource_uri, expected=(200,))
        data = self._json(resp)
        try:
            status = TaskStatus(data.get("status"))
        except ValueError as e:
            raise VaasClientError(f"Unknown VaaS task status in {data}") from e
        task.status = status
        task.info = data.get("info")
