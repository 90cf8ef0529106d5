"""Migration services."""

from channel_migrator.services.batch import run_bounded
from channel_migrator.services.entity_loader import EntityLoader, EntityLoadOutcome
from channel_migrator.services.export_reader import SourceExport, load_export, parse_export
from channel_migrator.services.identifiers import (
    IdentifierGenerator,
    SequenceIdentifierGenerator,
    random_identifier,
)
from channel_migrator.services.orchestrator import MigrationOrchestrator
from channel_migrator.services.progress import (
    LogProgressObserver,
    NullProgressObserver,
    ProgressObserver,
    TqdmProgressObserver,
)
from channel_migrator.services.providers import extract_provider

__all__ = [
    "run_bounded",
    "EntityLoader",
    "EntityLoadOutcome",
    "SourceExport",
    "load_export",
    "parse_export",
    "IdentifierGenerator",
    "SequenceIdentifierGenerator",
    "random_identifier",
    "MigrationOrchestrator",
    "ProgressObserver",
    "NullProgressObserver",
    "LogProgressObserver",
    "TqdmProgressObserver",
    "extract_provider",
]
