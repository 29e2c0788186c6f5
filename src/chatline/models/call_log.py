"""Call history records."""

from datetime import datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chatline.db.session import Base
from chatline.db.time import utcnow

CALL_TYPES = ("audio", "video")
CALL_STATUSES = ("accepted", "rejected", "missed", "canceled")


class CallLog(Base):
    """Terminal outcome of one call attempt. Append-only."""

    __tablename__ = "call_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    caller_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    receiver_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    call_type: Mapped[str] = mapped_column(String(8), nullable=False)
    start_time: Mapped[datetime] = mapped_column(default=utcnow)
    end_time: Mapped[datetime | None] = mapped_column(nullable=True)
    call_status: Mapped[str] = mapped_column(String(16), nullable=False, default="missed")
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
