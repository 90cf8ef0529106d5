"""Run report schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResultLog(BaseModel):
    """Per-entity outcome of a run, keyed by source user id."""

    ok: list[str] = Field(default_factory=list, description="Source ids migrated")
    failed: list[str] = Field(default_factory=list, description="Source ids that failed")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": ["0Hc2cYx1", "9sjW2kaP"],
                "failed": ["Tz81hQ0v"],
            }
        }
    )

    def record_ok(self, user_id: str) -> None:
        self.ok.append(user_id)

    def record_failed(self, user_id: str) -> None:
        self.failed.append(user_id)

    @property
    def total(self) -> int:
        return len(self.ok) + len(self.failed)


class EntityProgress(BaseModel):
    """Progress notification emitted before each entity is loaded."""

    position: int = Field(ge=1, description="1-based position in the run")
    total: int = Field(ge=0)
    user_id: str
    channel_title: str | None = None
    track_count: int | None = None

    def describe(self) -> str:
        """Operator-facing progress line."""
        channel = self.channel_title or "no channel"
        tracks = self.track_count or "no tracks"
        return f"Inserting {self.position} of {self.total} {self.user_id} {channel} {tracks}"


class RejectedRecord(BaseModel):
    """Export record that failed validation and was never loaded."""

    position: int = Field(ge=1, description="1-based position in the export")
    user_id: str | None = Field(default=None, description="Source id, when readable")
    errors: list[str] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Report written at the end of a run."""

    result: ResultLog
    rejected: list[RejectedRecord] = Field(default_factory=list)
    row_counts: dict[str, int] = Field(default_factory=dict)
    started_at: datetime
    completed_at: datetime
