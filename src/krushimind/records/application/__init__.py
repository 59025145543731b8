"""Application layer for the records context."""

from records.application.observability import (
    DefaultRecordServiceProbe,
    RecordServiceProbe,
)
from records.application.services import RecordService

__all__ = [
    "DefaultRecordServiceProbe",
    "RecordService",
    "RecordServiceProbe",
]
