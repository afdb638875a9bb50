"""Typed queries over an instance descriptor."""
from __future__ import annotations

import re
from typing import Optional

from vaas_hook.models.schemas import InstanceDescriptor

DIRECTOR_LABEL = "director"
WEIGHT_LABEL = "weight"
CANARY_LABEL = "canary"
ASYNC_LABEL = "vaas-queue"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_int(raw: str) -> int:
    """Parse a base 10 integer, rejecting whitespace and digit separators."""
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"invalid integer {raw!r}")
    return int(raw)


class InstanceMetadata:
    """Named accessors for the labels, ports and environment of a task.

    Label lookups return None when the label is unset, so an unset label can
    be told apart from one set to the empty string.
    """

    def __init__(self, task_info: InstanceDescriptor):
        self._task_info = task_info

    @property
    def task_id(self) -> str:
        return self._task_info.task_id

    def label(self, key: str) -> Optional[str]:
        return self._task_info.labels.get(key)

    def director(self) -> Optional[str]:
        return self.label(DIRECTOR_LABEL)

    def weight(self) -> int:
        """Weight from the ``weight`` label.

        Raises KeyError when the label is missing and ValueError when it is
        not an integer.
        """
        raw = self.label(WEIGHT_LABEL)
        if raw is None:
            raise KeyError(f"label {WEIGHT_LABEL!r} not set")
        return parse_int(raw)

    def is_canary(self) -> bool:
        return bool(self.label(CANARY_LABEL))

    def is_async(self) -> bool:
        return self.label(ASYNC_LABEL) == "true"

    def ports(self) -> list[int]:
        return list(self._task_info.ports)

    def env_value(self, name: str) -> Optional[str]:
        return self._task_info.env.get(name)
