from __future__ import annotations
from enum import Enum
from typing import Union

from pydantic import BaseModel


class ByteOrder(str, Enum):
    BIG = "big"
    LITTLE = "little"

    @property
    def struct_prefix(self) -> str:
        return ">" if self is ByteOrder.BIG else "<"


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Anything a primitive or a format helper may bind under a name
FieldValue = Union[int, float, str, bytes, BaseModel]
