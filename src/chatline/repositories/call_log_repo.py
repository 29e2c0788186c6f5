"""Data access helpers for call history."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from chatline.db.time import utcnow
from chatline.models import CallLog

from .base import commit_or_raise

__all__ = ["CallLogRepository"]


class CallLogRepository:
    """Append-only access to call log records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(
        self,
        *,
        caller_id: str,
        receiver_id: str,
        call_type: str,
        call_status: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> CallLog:
        """Insert a terminal call record."""
        record = CallLog(
            caller_id=caller_id,
            receiver_id=receiver_id,
            call_type=call_type,
            call_status=call_status,
            start_time=start_time or utcnow(),
            end_time=end_time,
        )
        self.session.add(record)
        commit_or_raise(self.session, "store call log")
        self.session.refresh(record)
        return record

    def history(self, identity: str) -> list[CallLog]:
        """Return calls where ``identity`` was either party, newest first."""
        stmt = (
            select(CallLog)
            .where(or_(CallLog.caller_id == identity, CallLog.receiver_id == identity))
            .order_by(CallLog.created_at.desc(), CallLog.id.desc())
        )
        return list(self.session.execute(stmt).scalars())
