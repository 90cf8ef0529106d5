"""Core utilities package."""

from channel_migrator.core.exceptions import (
    BatchInsertError,
    MigrationError,
    ResetError,
    SourceDataError,
)
from channel_migrator.core.logging import configure_logging
from channel_migrator.core.results import Failure, Stage, StepResult, Success

__all__ = [
    "configure_logging",
    "MigrationError",
    "ResetError",
    "BatchInsertError",
    "SourceDataError",
    "Stage",
    "Success",
    "Failure",
    "StepResult",
]
