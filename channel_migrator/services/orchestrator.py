"""Migration orchestrator - resets the destination and loads every entity."""

from collections.abc import Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError

from channel_migrator.core.exceptions import MigrationError, ResetError
from channel_migrator.core.results import Failure
from channel_migrator.db.store import DestinationStore
from channel_migrator.repositories.migration_repo import MigrationRepository
from channel_migrator.schemas.report import EntityProgress, ResultLog
from channel_migrator.schemas.source import SourceEntity
from channel_migrator.services.entity_loader import EntityLoader
from channel_migrator.services.progress import NullProgressObserver, ProgressObserver

logger = structlog.get_logger(__name__)


class MigrationOrchestrator:
    """
    Runs a full-replace migration.

    Handles:
    - Emptying the destination tables before anything is loaded
    - Loading entities one at a time, in source order
    - One transaction per entity, rolled back when any step fails
    - Recording every entity as ok or failed
    - Progress notifications
    """

    def __init__(
        self,
        store: DestinationStore,
        repo: MigrationRepository,
        loader: EntityLoader,
        observer: ProgressObserver | None = None,
    ):
        self.store = store
        self.repo = repo
        self.loader = loader
        self.observer = observer or NullProgressObserver()

    async def reset(self) -> None:
        """Empty the destination tables.

        Raises:
            ResetError: the run cannot continue
        """
        logger.info("Clearing destination tables")
        try:
            async with self.store.transaction():
                await self.repo.clear_all()
        except SQLAlchemyError as e:
            # clear_all succeeded but the commit did not
            raise ResetError(None, e) from e
        logger.info("Destination tables cleared")

    async def run(self, entities: Sequence[SourceEntity]) -> ResultLog:
        """Load every entity in order; one failure never stops the run."""
        log = ResultLog()
        total = len(entities)

        for position, entity in enumerate(entities, start=1):
            self.observer.on_entity(
                EntityProgress(
                    position=position,
                    total=total,
                    user_id=entity.user_id,
                    channel_title=entity.channel.title if entity.channel else None,
                    track_count=entity.track_count,
                )
            )

            if await self._migrate_entity(entity):
                log.record_ok(entity.user_id)
            else:
                log.record_failed(entity.user_id)

        logger.info(
            "Migration run finished",
            total=total,
            ok=len(log.ok),
            failed=len(log.failed),
        )
        return log

    async def migrate(self, entities: Sequence[SourceEntity]) -> ResultLog:
        """Reset the destination, then load every entity."""
        await self.reset()
        return await self.run(entities)

    async def _migrate_entity(self, entity: SourceEntity) -> bool:
        try:
            async with self.store.transaction() as trans:
                result = await self.loader.load(entity)
                if isinstance(result, Failure):
                    await trans.rollback()
                    logger.warning(
                        "Entity failed, rolled back",
                        user_id=entity.user_id,
                        stage=result.stage.value,
                        error=result.describe(),
                    )
                    return False
        except (SQLAlchemyError, MigrationError) as e:
            logger.warning("Entity failed", user_id=entity.user_id, error=str(e))
            return False
        except Exception:
            logger.exception("Unexpected error, entity rolled back", user_id=entity.user_id)
            return False

        logger.debug(
            "Entity migrated",
            user_id=entity.user_id,
            new_user_id=str(result.value.user_id),
            tracks=len(result.value.track_ids),
        )
        return True
