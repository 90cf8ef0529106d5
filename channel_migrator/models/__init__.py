"""SQLAlchemy models for the destination schema."""

from channel_migrator.models.auth_user import AuthUser
from channel_migrator.models.base import Base
from channel_migrator.models.channel import Channel, UserChannel
from channel_migrator.models.track import ChannelTrack, Track

__all__ = [
    "Base",
    "AuthUser",
    "Channel",
    "UserChannel",
    "Track",
    "ChannelTrack",
]
