"""Polling of queued VaaS changes until they succeed, fail or run out of time."""
from __future__ import annotations

import asyncio
import logging

from vaas_hook.core.config import settings
from vaas_hook.metrics.prometheus import TASK_POLLS
from vaas_hook.models.schemas import Task, TaskStatus
from vaas_hook.services.vaas_client import VaasClient, VaasClientError

log = logging.getLogger("vaas.poller")


class TaskStatusError(RuntimeError):
    """Base class for unsuccessful task outcomes."""


class TaskFailedError(TaskStatusError):
    """VaaS reported the change as failed."""


class TaskTimeoutError(TaskStatusError):
    """The change did not finish before the deadline."""


class StatusPoller:
    """
    Polls a VaaS task every ``interval_s`` seconds for at most ``max_wait_s``.

    Fetch errors are logged and the loop carries on; only the deadline ends
    the wait without a terminal status. When the deadline fires the loop is
    cancelled, including a status request that is still in flight.
    """

    def __init__(self, client: VaasClient, interval_s: float = 1.0, max_wait_s: float = 90.0):
        self._client = client
        self._interval = interval_s
        self._max_wait = max_wait_s

    @classmethod
    def from_settings(cls, client: VaasClient) -> "StatusPoller":
        return cls(client, settings.task_poll_interval_s, settings.task_max_wait_s)

    async def wait(self, task: Task) -> None:
        """Return once the task succeeded; raise TaskStatusError otherwise."""
        try:
            await asyncio.wait_for(self._poll(task), timeout=self._max_wait)
        except asyncio.TimeoutError:
            log.warning("VaaS registration timed out, will attempt cleanup...")
            raise TaskTimeoutError(
                f"VaaS registration timed out after {self._max_wait}s "
                f"(last status {task.status.value})"
            ) from None

    async def _poll(self, task: Task) -> None:
        while True:
            await asyncio.sleep(self._interval)
            log.debug("Checking VaaS task status on %s", task.resource_uri)
            try:
                await self._client.task_status(task)
            except VaasClientError as e:
                TASK_POLLS.labels(status="error").inc()
                log.warning("Error getting VaaS task status: %s", e)
                continue

            TASK_POLLS.labels(status=task.status.value).inc()
            log.debug("Received status: %s, info: %s", task.status.value, task.info)
            if task.status is TaskStatus.FAILURE:
                raise TaskFailedError(f"Registration in VaaS failed: {task.info}")
            if task.status is TaskStatus.SUCCESS:
                log.info("VaaS task %s finished successfully", task.resource_uri)
                return
