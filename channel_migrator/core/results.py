"""Per-step results for the entity pipeline.

Every load step returns either ``Success`` carrying the value later steps
need, or ``Failure`` naming the stage that broke and the underlying cause.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class Stage(str, Enum):
    """Load steps, in execution order."""

    USER = "user"
    CHANNEL = "channel"
    MEMBERSHIP = "membership"
    TRACKS = "tracks"
    CHANNEL_TRACKS = "channel_tracks"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    stage: Stage
    cause: BaseException

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        """One-line summary for logs."""
        return f"{self.stage.value}: {type(self.cause).__name__}: {self.cause}"


StepResult = Success[T] | Failure
