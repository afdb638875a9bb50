# tests/conftest.py
from __future__ import annotations

from typing import Iterable, Optional

import pytest

from vaas_hook.core.config import settings
from vaas_hook.models.schemas import DC, Backend, BackendSubmission, InstanceDescriptor, Task, TaskStatus
from vaas_hook.services.hook import Hook
from vaas_hook.services.poller import StatusPoller

# --- helpers ---------------------------------------------------------------

class FakeVaasClient:
    """In-memory stand-in for VaasClient that records every call."""

    def __init__(
        self,
        statuses: Iterable[object] = (TaskStatus.SUCCESS,),
        director_id: int = 7,
        backend_id: int = 42,
        add_error: Optional[Exception] = None,
        delete_errors: Iterable[Exception] = (),
        dc_error: Optional[Exception] = None,
    ):
        self.calls: list[str] = []
        self.submitted: list[tuple[Backend, bool]] = []
        self.deleted: list[int] = []
        self.polled_tasks: list[Task] = []
        self._statuses = list(statuses)
        self._director_id = director_id
        self._backend_id = backend_id
        self._add_error = add_error
        self._delete_errors = list(delete_errors)
        self._dc_error = dc_error

    async def get_dc(self, symbol: str) -> DC:
        self.calls.append("get_dc")
        if self._dc_error:
            raise self._dc_error
        return DC(id=1, name="Test DC", symbol=symbol, resource_uri="/api/v0.1/dc/1/")

    async def find_director_id(self, name: str) -> int:
        self.calls.append("find_director_id")
        return self._director_id

    async def add_backend(self, backend: Backend, async_: bool = False) -> BackendSubmission:
        self.calls.append("add_backend")
        self.submitted.append((backend, async_))
        if self._add_error:
            raise self._add_error
        location = "/api/v0.1/task/abc/" if async_ else f"/api/v0.1/backend/{self._backend_id}/"
        return BackendSubmission(backend_id=self._backend_id, location=location)

    async def delete_backend(self, backend_id: int) -> None:
        self.calls.append("delete_backend")
        self.deleted.append(backend_id)
        if self._delete_errors:
            raise self._delete_errors.pop(0)

    async def task_status(self, task: Task) -> None:
        self.calls.append("task_status")
        self.polled_tasks.append(task)
        # the last scripted status repeats once the script is exhausted
        item = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        if isinstance(item, Exception):
            raise item
        task.status = item


def make_task_info(labels=None, ports=(31000,), env=None) -> InstanceDescriptor:
    return InstanceDescriptor(
        task_id="service.instance-1",
        labels=labels if labels is not None else {"director": "service_director"},
        ports=list(ports),
        env=env or {},
    )


def make_hook(client: FakeVaasClient, interval_s: float = 0.001, max_wait_s: float = 0.2) -> Hook:
    return Hook(client, StatusPoller(client, interval_s=interval_s, max_wait_s=max_wait_s))

# --- fixtures --------------------------------------------------------------

@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def runtime(monkeypatch):
    """Pin the runtime facts the hook reads from settings."""
    monkeypatch.setattr(settings, "datacenter", "dc6")
    monkeypatch.setattr(settings, "host_ip", "10.0.0.5")
    monkeypatch.setattr(settings, "environment", "test")
