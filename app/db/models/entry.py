from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.schemas.records import EntrySource


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        # one direct and at most one referral bonus entry per user and giveaway
        UniqueConstraint("user_id", "giveaway_id", "entry_source", name="uq_entries_user_giveaway_source"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    giveaway_id: Mapped[int] = mapped_column(Integer, ForeignKey("giveaways.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    entry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    referral_code_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("referral_codes.id"), nullable=True)
    entry_source: Mapped[EntrySource] = mapped_column(
        SqlEnum(EntrySource, native_enum=False, length=32), nullable=False, default=EntrySource.direct
    )
