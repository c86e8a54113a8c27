"""Stored entity records.

These are the values the entity store hands out. Both store backings build
them through ``model_validate``, so a record that fails validation here is
rejected identically by the in-memory and the SQL backing.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.clock import as_naive_utc, utcnow


class Category(str, Enum):
    disney_plus = "Disney+"
    netflix = "Netflix"
    paramount_plus = "Paramount+"
    hbo_max = "HBO Max"
    hulu = "Hulu"
    amazon_prime = "Amazon Prime"
    apple_tv_plus = "Apple TV+"
    peacock = "Peacock"
    spotify = "Spotify"
    youtube_premium = "YouTube Premium"
    other = "Other"


class Region(str, Enum):
    global_ = "Global"
    usa_only = "USA Only"
    europe = "Europe"
    asia = "Asia"
    australia = "Australia"
    africa = "Africa"
    south_america = "South America"
    other = "Other"


class EntrySource(str, Enum):
    direct = "direct"
    referral_bonus = "referral_bonus"


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    # Assigned by the store on create.
    id: int | None = None


class UserRecord(Record):
    username: str
    password_hash: str
    email: str
    full_name: str
    country: str
    is_admin: bool = False
    subscribed_to_newsletter: bool = False


class GiveawayRecord(Record):
    title: str
    description: str
    image_url: str
    prize: str
    category: Category
    region: Region = Region.global_
    eligibility_requirements: str
    value: str | None = None
    target_entries: int | None = None
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    is_popular: bool = False
    is_premium: bool = False
    is_featured: bool = False
    created_by_user_id: int | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return as_naive_utc(value)


class EntryRecord(Record):
    giveaway_id: int
    user_id: int
    entry_date: datetime = Field(default_factory=utcnow)
    is_winner: bool = False
    referral_code_id: int | None = None
    entry_source: EntrySource = EntrySource.direct


class WinnerRecord(Record):
    giveaway_id: int
    user_id: int
    entry_id: int
    announcement_date: datetime = Field(default_factory=utcnow)
    testimonial: str | None = None
    location: str | None = None


class ReferralCodeRecord(Record):
    user_id: int
    code: str
    created_at: datetime = Field(default_factory=utcnow)
    is_active: bool = True


class ReferralEntryRecord(Record):
    referral_code_id: int
    referred_user_id: int
    giveaway_id: int
    entry_id: int | None = None
    created_at: datetime = Field(default_factory=utcnow)
    bonus_entries: int = 1


ALL_RECORDS = (
    UserRecord,
    GiveawayRecord,
    EntryRecord,
    WinnerRecord,
    ReferralCodeRecord,
    ReferralEntryRecord,
)
