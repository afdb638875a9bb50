"""Pydantic models used by the VaaS hook.

Covers the VaaS REST resources the hook reads and writes (DC, Backend, Task)
and the lifecycle events it receives from the executor.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """State of a queued VaaS configuration change."""
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class DC(BaseModel):
    """Datacenter resource as returned by VaaS."""
    id: Optional[int] = None
    name: Optional[str] = None
    symbol: str
    resource_uri: Optional[str] = None


class Backend(BaseModel):
    """Backend resource submitted to VaaS.

    ``id`` and ``resource_uri`` are assigned by VaaS. A ``weight`` of None is
    left out of the request so VaaS applies its default.
    """
    id: Optional[int] = None
    address: str
    director: str
    weight: Optional[int] = None
    dc: DC
    port: int
    inherit_time_profile: bool = True
    tags: List[str] = Field(default_factory=list)
    resource_uri: Optional[str] = None

    def to_payload(self) -> dict:
        """JSON body for backend creation."""
        return self.model_dump(exclude_none=True)


class Task(BaseModel):
    """Pending asynchronous VaaS change, polled at ``resource_uri``."""
    resource_uri: str
    status: TaskStatus = TaskStatus.PENDING
    info: Optional[str] = None


class BackendSubmission(BaseModel):
    """Outcome of a backend create request."""
    backend_id: int
    # Task URI for async submissions, backend resource URI otherwise
    location: str = ""


class EventType(str, Enum):
    """Lifecycle events emitted by the executor."""
    BEFORE_TASK_START = "BeforeTaskStartEvent"
    AFTER_TASK_HEALTHY = "AfterTaskHealthyEvent"
    BEFORE_TERMINATE = "BeforeTerminateEvent"
    AFTER_TERMINATE = "AfterTerminateEvent"


class InstanceDescriptor(BaseModel):
    """The parts of a Mesos TaskInfo the hook reads."""
    task_id: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    ports: List[int] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)


class LifecycleEvent(BaseModel):
    """Event delivered to the hook. ``type`` stays a plain string so that
    kinds the hook does not know about are still accepted."""
    type: str
    task_info: InstanceDescriptor = Field(default_factory=InstanceDescriptor)
