"""Append-only in-memory record of scored charges."""

import uuid
from collections import deque
from datetime import UTC, datetime

import structlog

from .models import ChargeAssessment, ChargeContext, LedgerEntry

logger = structlog.get_logger()


class TransactionLedger:
    """Keeps the most recent ``max_entries`` scored charges for the process lifetime."""

    def __init__(self, max_entries: int = 10_000) -> None:
        self._entries: deque[LedgerEntry] = deque(maxlen=max_entries)

    def record(self, charge: ChargeContext, assessment: ChargeAssessment) -> LedgerEntry:
        entry = LedgerEntry(
            transaction_id=str(uuid.uuid4()),
            charge=charge,
            assessment=assessment,
            recorded_at=datetime.now(UTC),
        )
        self._entries.append(entry)
        logger.info(
            "transaction_recorded",
            transaction_id=entry.transaction_id,
            decision=assessment.decision.value,
        )
        return entry

    def recent(self, limit: int = 50) -> list[LedgerEntry]:
        """Newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._entries))[:limit]

    def __len__(self) -> int:
        return len(self._entries)
