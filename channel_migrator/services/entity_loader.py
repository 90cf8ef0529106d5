"""Per-entity load pipeline.

One entity is written in dependency order:

    user -> channel -> membership -> tracks -> channel-track links

Each step returns a ``Success`` carrying the keys later steps need, or a
``Failure`` naming the step. The pipeline stops at the first failure; the
caller owns the surrounding transaction and rolls it back.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from channel_migrator.core.exceptions import BatchInsertError
from channel_migrator.core.results import Failure, Stage, StepResult, Success
from channel_migrator.repositories.migration_repo import InsertedTrack, MigrationRepository
from channel_migrator.schemas.source import AuthUserSource, ChannelSource, SourceEntity, TrackSource
from channel_migrator.services.batch import run_bounded
from channel_migrator.services.identifiers import IdentifierGenerator, random_identifier
from channel_migrator.services.providers import DEFAULT_PROVIDER, extract_provider

logger = structlog.get_logger(__name__)


@dataclass
class EntityLoadOutcome:
    """Destination keys written for one entity."""

    user_id: UUID
    channel_id: UUID | None = None
    track_ids: list[UUID] = field(default_factory=list)


async def _attempt(stage: Stage, step: Callable[[], Awaitable]) -> StepResult:
    try:
        return Success(await step())
    except (SQLAlchemyError, BatchInsertError) as e:
        return Failure(stage, e)


class EntityLoader:
    """Writes one source entity to the destination."""

    def __init__(
        self,
        repo: MigrationRepository,
        new_id: IdentifierGenerator = random_identifier,
        concurrency: int = 8,
        default_provider: str = DEFAULT_PROVIDER,
    ):
        self.repo = repo
        self.new_id = new_id
        self.concurrency = concurrency
        self.default_provider = default_provider

    async def load(self, entity: SourceEntity) -> StepResult[EntityLoadOutcome]:
        """Run every applicable step for ``entity``."""
        user = await self.load_user(entity.user)
        if not user.ok:
            return user
        outcome = EntityLoadOutcome(user_id=user.value)

        # A user without a channel is fully migrated at this point
        if entity.channel is None:
            return Success(outcome)

        channel = await self.load_channel(entity.channel)
        if not channel.ok:
            return channel
        outcome.channel_id = channel.value

        membership = await self.load_membership(outcome.user_id, outcome.channel_id)
        if not membership.ok:
            return membership

        if entity.tracks is None:
            return Success(outcome)

        tracks = await self.load_tracks(entity.tracks)
        if not tracks.ok:
            return tracks
        outcome.track_ids = [t.id for t in tracks.value]

        links = await self.load_channel_tracks(outcome.user_id, outcome.channel_id, tracks.value)
        if not links.ok:
            return links

        return Success(outcome)

    async def load_user(self, user: AuthUserSource) -> StepResult[UUID]:
        user_id = self.new_id()
        provider = extract_provider(user.provider_user_info, self.default_provider)
        return await _attempt(
            Stage.USER,
            lambda: self.repo.insert_auth_user(user_id, user, provider),
        )

    async def load_channel(self, channel: ChannelSource) -> StepResult[UUID]:
        return await _attempt(Stage.CHANNEL, lambda: self.repo.insert_channel(channel))

    async def load_membership(self, user_id: UUID, channel_id: UUID) -> StepResult[None]:
        return await _attempt(
            Stage.MEMBERSHIP,
            lambda: self.repo.insert_user_channel(user_id, channel_id),
        )

    async def load_tracks(self, tracks: list[TrackSource]) -> StepResult[list[InsertedTrack]]:
        """Insert every track that has a url, as one concurrent batch."""
        playable = [t for t in tracks if t.has_url]
        skipped = len(tracks) - len(playable)
        if skipped:
            logger.debug("Skipping tracks without url", skipped=skipped)

        return await _attempt(
            Stage.TRACKS,
            lambda: run_bounded([self.repo.insert_track(t) for t in playable], self.concurrency),
        )

    async def load_channel_tracks(
        self,
        user_id: UUID,
        channel_id: UUID,
        tracks: list[InsertedTrack],
    ) -> StepResult[list[None]]:
        return await _attempt(
            Stage.CHANNEL_TRACKS,
            lambda: run_bounded(
                [self.repo.insert_channel_track(user_id, channel_id, t) for t in tracks],
                self.concurrency,
            ),
        )
