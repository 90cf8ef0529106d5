"""Destination repository for the migration.

Builds the insert/delete statements for the destination tables and runs them
through a ``DestinationStore``.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from channel_migrator.config import Settings
from channel_migrator.core.exceptions import ResetError
from channel_migrator.db.store import DestinationStore
from channel_migrator.models import AuthUser, Channel, ChannelTrack, Track, UserChannel
from channel_migrator.schemas.source import AuthUserSource, ChannelSource, TrackSource

logger = structlog.get_logger(__name__)

# Children before parents
RESET_ORDER = [ChannelTrack, Channel, Track, UserChannel, AuthUser]


@dataclass(frozen=True)
class InsertedTrack:
    """Key and timestamp the destination assigned to a new track."""

    id: UUID
    created_at: datetime


class MigrationRepository:
    """Repository for destination writes."""

    def __init__(self, store: DestinationStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def clear_all(self) -> None:
        """Delete every row from the destination tables.

        Raises:
            ResetError: naming the first table that could not be cleared
        """
        for model in RESET_ORDER:
            table = model.__table__.fullname
            try:
                await self.store.execute(delete(model))
            except SQLAlchemyError as e:
                raise ResetError(table, e) from e
            logger.debug("Cleared table", table=table)

    async def insert_auth_user(
        self,
        user_id: UUID,
        user: AuthUserSource,
        provider: str,
    ) -> UUID:
        """Insert an auth user under a freshly generated id."""
        created_at = user.created_at
        stmt = (
            insert(AuthUser)
            .values(
                id=user_id,
                instance_id=UUID(self.settings.instance_id),
                aud=self.settings.auth_audience,
                role=self.settings.auth_role,
                email=user.email,
                encrypted_password=user.password_hash,
                email_confirmed_at=created_at,
                created_at=created_at,
                updated_at=created_at,
                last_sign_in_at=created_at,
                raw_app_meta_data={"provider": provider},
                raw_user_meta_data={},
                confirmation_token="",
                recovery_token="",
                email_change_token_new="",
                email_change="",
                is_super_admin=False,
            )
            .returning(AuthUser.id)
        )
        rows = await self.store.execute(stmt)
        return rows[0]["id"]

    async def insert_channel(self, channel: ChannelSource) -> UUID:
        """Insert a channel and return the id the destination assigned."""
        stmt = (
            insert(Channel)
            .values(
                name=channel.title,
                slug=channel.slug,
                description=channel.body,
                created_at=channel.created,
                updated_at=channel.updated,
                url=channel.link,
                image=channel.image,
            )
            .returning(Channel.id)
        )
        rows = await self.store.execute(stmt)
        return rows[0]["id"]

    async def insert_user_channel(self, user_id: UUID, channel_id: UUID) -> None:
        await self.store.execute(
            insert(UserChannel).values(user_id=user_id, channel_id=channel_id)
        )

    async def insert_track(self, track: TrackSource) -> InsertedTrack:
        """Insert a track, keeping the source timestamp when there is one."""
        values = {
            "url": track.url,
            "title": track.title,
            "description": track.body,
        }
        if track.created is not None:
            values["created_at"] = track.created

        stmt = insert(Track).values(**values).returning(Track.id, Track.created_at)
        rows = await self.store.execute(stmt)
        return InsertedTrack(id=rows[0]["id"], created_at=rows[0]["created_at"])

    async def insert_channel_track(
        self,
        user_id: UUID,
        channel_id: UUID,
        track: InsertedTrack,
    ) -> None:
        await self.store.execute(
            insert(ChannelTrack).values(
                user_id=user_id,
                channel_id=channel_id,
                track_id=track.id,
                created_at=track.created_at,
            )
        )

    async def count_rows(self) -> dict[str, int]:
        """Row count per destination table, in reset order."""
        counts = {}
        for model in RESET_ORDER:
            rows = await self.store.execute(select(func.count().label("n")).select_from(model))
            counts[model.__table__.fullname] = rows[0]["n"]
        return counts
