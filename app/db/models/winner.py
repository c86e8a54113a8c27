from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Winner(Base):
    __tablename__ = "winners"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # unique: a giveaway is decided exactly once
    giveaway_id: Mapped[int] = mapped_column(Integer, ForeignKey("giveaways.id"), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    entry_id: Mapped[int] = mapped_column(Integer, ForeignKey("entries.id"), nullable=False)
    announcement_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    testimonial: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(120), nullable=True)
