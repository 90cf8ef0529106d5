"""Repository package for destination access."""

from channel_migrator.repositories.migration_repo import (
    RESET_ORDER,
    InsertedTrack,
    MigrationRepository,
)

__all__ = [
    "MigrationRepository",
    "InsertedTrack",
    "RESET_ORDER",
]
