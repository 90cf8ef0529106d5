"""Custom exception classes for migration errors."""

from typing import Any


class MigrationError(Exception):
    """Base migration error with structured details."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Any = None,
    ):
        self.code = code
        self.error_message = message
        self.details = details

        super().__init__(message)


class ResetError(MigrationError):
    """Destination tables could not be emptied; the run must stop."""

    def __init__(self, table: str | None, cause: BaseException):
        message = "Could not commit destination cleanup"
        if table:
            message = f"Could not clear destination table '{table}'"

        super().__init__(
            code="RESET_FAILED",
            message=message,
            details={"table": table, "cause": str(cause)},
        )


class BatchInsertError(MigrationError):
    """At least one member of a concurrent insert batch failed."""

    def __init__(self, errors: list[BaseException], size: int):
        self.errors = errors
        super().__init__(
            code="BATCH_FAILED",
            message=f"{len(errors)} of {size} inserts in batch failed",
            details={"errors": [str(e) for e in errors]},
        )


class SourceDataError(MigrationError):
    """Source export could not be read or validated."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            code="INVALID_SOURCE",
            message=message,
            details=details,
        )
