"""Wire up and execute one migration run."""

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from channel_migrator.config import Settings
from channel_migrator.db.store import DestinationStore
from channel_migrator.repositories.migration_repo import MigrationRepository
from channel_migrator.schemas.report import RejectedRecord, RunSummary
from channel_migrator.schemas.source import SourceEntity
from channel_migrator.services.entity_loader import EntityLoader
from channel_migrator.services.identifiers import IdentifierGenerator, random_identifier
from channel_migrator.services.orchestrator import MigrationOrchestrator
from channel_migrator.services.progress import ProgressObserver

logger = structlog.get_logger(__name__)


async def run_migration(
    engine: AsyncEngine,
    entities: list[SourceEntity],
    settings: Settings,
    observer: ProgressObserver | None = None,
    new_id: IdentifierGenerator = random_identifier,
    rejected: Sequence[RejectedRecord] = (),
) -> RunSummary:
    """Reset the destination and migrate ``entities`` on a single connection.

    Rejected export records that carry a readable source id are reported as
    failed after the loaded entities.

    Raises:
        ResetError: the destination could not be emptied
    """
    started_at = datetime.now(UTC)

    async with engine.connect() as conn:
        store = DestinationStore(conn)
        repo = MigrationRepository(store, settings)
        loader = EntityLoader(
            repo,
            new_id=new_id,
            concurrency=settings.insert_concurrency,
            default_provider=settings.default_provider,
        )
        orchestrator = MigrationOrchestrator(store, repo, loader, observer)

        result = await orchestrator.migrate(entities)
        for record in rejected:
            if record.user_id is not None:
                result.record_failed(record.user_id)

        async with store.transaction():
            row_counts = await repo.count_rows()

    return RunSummary(
        result=result,
        rejected=list(rejected),
        row_counts=row_counts,
        started_at=started_at,
        completed_at=datetime.now(UTC),
    )


def save_summary(summary: RunSummary, report_dir: Path) -> Path:
    """Write the run summary as JSON and return its path."""
    report_dir.mkdir(parents=True, exist_ok=True)
    filepath = report_dir / f"migration_report_{summary.started_at.strftime('%Y%m%d_%H%M%S')}.json"
    filepath.write_text(summary.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Saved migration report", path=str(filepath))
    return filepath
