"""
SketchSnap - Operation Results
==============================

Results of click-to-pick (hit_test.pick_entity) and of the three-point
arc builder (construction.make_arc_from_three_points). "Nothing under the
cursor" and collinear input are reported through the status, not by raising.
"""

from dataclasses import dataclass
from typing import Any
from enum import Enum, auto


class ResultStatus(Enum):
    """Status of an operation."""
    SUCCESS = auto()
    NO_TARGET = auto()  # Nothing under the cursor
    ERROR = auto()  # Collinear arc points


@dataclass
class OperationResult:
    """
    Outcome of a pick or an arc construction.

    `data` holds the picked entity or the built Arc on SUCCESS.
    """
    status: ResultStatus
    message: str = ""
    data: Any = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == ResultStatus.ERROR

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> 'OperationResult':
        return cls(ResultStatus.SUCCESS, message, data)

    @classmethod
    def no_target(cls, message: str = "No target found") -> 'OperationResult':
        return cls(ResultStatus.NO_TARGET, message)

    @classmethod
    def error(cls, message: str) -> 'OperationResult':
        return cls(ResultStatus.ERROR, message)
