"""Read the grouped source export.

The export is a JSON array with one object per source user::

    [{"user": {...}, "channel": {...} | null, "tracks": [...] | null}, ...]

Grouping raw source records by user happens upstream. Records are validated
one at a time; a record that does not validate is rejected on its own and the
rest of the export is still migrated.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import ValidationError

from channel_migrator.core.exceptions import SourceDataError
from channel_migrator.schemas.report import RejectedRecord
from channel_migrator.schemas.source import AuthUserSource, SourceEntity

logger = structlog.get_logger(__name__)


@dataclass
class SourceExport:
    """Validated entities plus the records that were rejected."""

    entities: list[SourceEntity] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)


def _readable_user_id(record: object) -> str | None:
    if not isinstance(record, dict):
        return None
    try:
        return AuthUserSource.model_validate(record.get("user")).id
    except ValidationError:
        return None


def _error_lines(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
        for err in error.errors(include_url=False, include_input=False)
    ]


def parse_export(data: object) -> SourceExport:
    """Validate already-decoded export data, record by record.

    Raises:
        SourceDataError: the data is not a list of records
    """
    if not isinstance(data, list):
        raise SourceDataError(
            "Export must be a JSON array of records",
            details={"type": type(data).__name__},
        )

    export = SourceExport()
    for position, record in enumerate(data, start=1):
        try:
            export.entities.append(SourceEntity.model_validate(record))
        except ValidationError as e:
            rejected = RejectedRecord(
                position=position,
                user_id=_readable_user_id(record),
                errors=_error_lines(e),
            )
            logger.warning(
                "Rejected invalid export record",
                position=position,
                user_id=rejected.user_id,
                errors=rejected.errors,
            )
            export.rejected.append(rejected)

    return export


def load_export(path: Path) -> SourceExport:
    """Load and validate the export file at ``path``.

    Raises:
        SourceDataError: the file cannot be read or is not a JSON array
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SourceDataError(f"Cannot read export file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SourceDataError(f"Export file {path} is not valid JSON: {e}") from e

    export = parse_export(data)
    logger.info(
        "Loaded source export",
        path=str(path),
        entities=len(export.entities),
        rejected=len(export.rejected),
    )
    return export
