"""Progress observers for migration runs."""

from typing import Protocol

import structlog
from tqdm import tqdm

from channel_migrator.schemas.report import EntityProgress

logger = structlog.get_logger(__name__)


class ProgressObserver(Protocol):
    def on_entity(self, progress: EntityProgress) -> None: ...


class NullProgressObserver:
    """Discards progress."""

    def on_entity(self, progress: EntityProgress) -> None:
        pass


class LogProgressObserver:
    """One log line per entity."""

    def on_entity(self, progress: EntityProgress) -> None:
        logger.info(
            progress.describe(),
            position=progress.position,
            total=progress.total,
            user_id=progress.user_id,
        )


class TqdmProgressObserver:
    """Progress bar for interactive runs."""

    def __init__(self, desc: str = "  Entities"):
        self.desc = desc
        self._bar: tqdm | None = None

    def on_entity(self, progress: EntityProgress) -> None:
        if self._bar is None:
            self._bar = tqdm(total=progress.total, desc=self.desc)
        self._bar.set_postfix_str(progress.describe(), refresh=False)
        self._bar.update(1)
        if progress.position >= progress.total:
            self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
