from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ReferralCode(Base):
    __tablename__ = "referral_codes"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ReferralEntry(Base):
    __tablename__ = "referral_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referral_code_id: Mapped[int] = mapped_column(Integer, ForeignKey("referral_codes.id"), nullable=False, index=True)
    referred_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    giveaway_id: Mapped[int] = mapped_column(Integer, ForeignKey("giveaways.id"), nullable=False, index=True)
    entry_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("entries.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    bonus_entries: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
