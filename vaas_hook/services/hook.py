"""VaaS backend lifecycle hook.

Registers a task as a backend of its VaaS director once it is healthy and
removes that backend before the task is terminated. Registration is either
synchronous, or queued by VaaS and then polled until it finishes.
"""
from __future__ import annotations

import logging
from typing import Optional

from vaas_hook.core import runenv
from vaas_hook.metrics.prometheus import DEREGISTRATIONS, REGISTRATIONS
from vaas_hook.models.schemas import (
    Backend,
    EventType,
    InstanceDescriptor,
    LifecycleEvent,
    Task,
    TaskStatus,
)
from vaas_hook.services.metadata import CANARY_LABEL, InstanceMetadata, parse_int
from vaas_hook.services.poller import StatusPoller, TaskStatusError
from vaas_hook.services.vaas_client import API_DIRECTOR_PATH, VaasClient, VaasClientError

log = logging.getLogger("vaas.hook")

BACKEND_ID_KEY = "vaas-backend-id"

# Task environment variable overriding the initial weight from labels
INITIAL_WEIGHT_ENV = "VAAS_INITIAL_WEIGHT"


class RegistrationError(RuntimeError):
    """Raised when a backend could not be registered in VaaS."""


class NoPortsError(RegistrationError):
    """The task advertises no port to register."""


class DeregistrationError(RuntimeError):
    """Raised when a backend could not be removed from VaaS."""


class Hook:
    """
    Manages the lifecycle of the VaaS backend of one task.

    The id of the registered backend is the only state. It is set once a
    backend is created and cleared once it is deleted, so repeated terminate
    events delete the backend at most once.
    """

    def __init__(self, client: VaasClient, poller: Optional[StatusPoller] = None):
        self._client = client
        self._poller = poller or StatusPoller.from_settings(client)
        self.backend_id: Optional[int] = None

    async def register_backend(self, task_info: InstanceDescriptor) -> None:
        """Add a backend for the task to its VaaS director."""
        meta = InstanceMetadata(task_info)
        director = meta.director()
        if not director:
            log.info("Director not set, skipping registration in VaaS.")
            return

        log.info("Registering backend of task %s in VaaS director %s...", meta.task_id, director)
        try:
            await self._register(meta, director)
        except Exception:
            REGISTRATIONS.labels(outcome="error").inc()
            raise

        REGISTRATIONS.labels(outcome="success").inc()
        log.info(
            "Registered backend with VaaS (%s=%s)", BACKEND_ID_KEY, self.backend_id,
            extra={BACKEND_ID_KEY: self.backend_id},
        )

    async def _register(self, meta: InstanceMetadata, director: str) -> None:
        dc = await self._client.get_dc(runenv.datacenter())
        director_id = await self._client.find_director_id(director)

        ports = meta.ports()
        if not ports:
            raise NoPortsError("Service has no ports available")

        backend = Backend(
            address=runenv.ip(),
            director=f"{API_DIRECTOR_PATH}{director_id}/",
            weight=self._initial_weight(meta),
            dc=dc,
            port=ports[0],
            inherit_time_profile=True,
            # VaaS requires every canary instance to carry the canary tag
            tags=[CANARY_LABEL] if meta.is_canary() else [],
        )

        if meta.is_async():
            await self._register_async(backend)
        else:
            await self._register_sync(backend)

    def _initial_weight(self, meta: InstanceMetadata) -> Optional[int]:
        weight: Optional[int] = None
        try:
            weight = meta.weight()
        except (KeyError, ValueError) as e:
            log.info("VaaS backend weight not set: %s", e)

        override = meta.env_value(INITIAL_WEIGHT_ENV)
        if override is not None:
            try:
                weight = parse_int(override)
            except ValueError:
                log.info("Ignoring non-integer %s=%r", INITIAL_WEIGHT_ENV, override)
        return weight

    async def _register_sync(self, backend: Backend) -> None:
        try:
            submission = await self._client.add_backend(backend, async_=False)
        except VaasClientError as e:
            raise RegistrationError(f"Could not register with VaaS director: {e}") from e
        self.backend_id = submission.backend_id

    async def _register_async(self, backend: Backend) -> None:
        try:
            submission = await self._client.add_backend(backend, async_=True)
        except VaasClientError as e:
            raise RegistrationError(f"Could not register with VaaS director: {e}") from e

        # Recorded before the change is confirmed so that a failed or timed
        # out registration is still cleaned up on termination.
        self.backend_id = submission.backend_id
        log.info("Waiting for successful Varnish configuration change...")

        task = Task(resource_uri=submission.location, status=TaskStatus.PENDING)
        try:
            await self._poller.wait(task)
        except TaskStatusError as e:
            raise RegistrationError(f"Could not register with VaaS director: {e}") from e

    async def deregister_backend(self, task_info: InstanceDescriptor) -> None:
        """Delete the backend registered by this hook, if any."""
        if self.backend_id is None:
            log.info("backendID not set - not deleting backend from VaaS")
            return

        log.info("%s=%s is set - scheduling backend for deletion via VaaS", BACKEND_ID_KEY, self.backend_id)
        try:
            await self._client.delete_backend(self.backend_id)
        except VaasClientError as e:
            DEREGISTRATIONS.labels(outcome="error").inc()
            raise DeregistrationError(f"Could not delete VaaS backend {self.backend_id}: {e}") from e

        DEREGISTRATIONS.labels(outcome="success").inc()
        log.info("Successfully scheduled backend %s for deletion via VaaS", self.backend_id)
        self.backend_id = None

    async def handle_event(self, event: LifecycleEvent) -> None:
        """Run the hook action for an event. Unsupported events are ignored."""
        if event.type == EventType.AFTER_TASK_HEALTHY.value:
            await self.register_backend(event.task_info)
        elif event.type == EventType.BEFORE_TERMINATE.value:
            await self.deregister_backend(event.task_info)
        else:
            log.debug("Received unsupported event type %s - ignoring", event.type)
