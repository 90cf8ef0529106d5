"""Pydantic schemas for source records and run reports."""

from channel_migrator.schemas.report import EntityProgress, RejectedRecord, ResultLog, RunSummary
from channel_migrator.schemas.source import (
    AuthUserSource,
    ChannelSource,
    ProviderInfo,
    SourceEntity,
    TrackSource,
)

__all__ = [
    "ProviderInfo",
    "AuthUserSource",
    "ChannelSource",
    "TrackSource",
    "SourceEntity",
    "ResultLog",
    "EntityProgress",
    "RejectedRecord",
    "RunSummary",
]
