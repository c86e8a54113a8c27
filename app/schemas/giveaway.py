from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.records import Category, Region

# request field -> record field
GIVEAWAY_FIELDS = {
    "title": "title",
    "description": "description",
    "imageUrl": "image_url",
    "prize": "prize",
    "category": "category",
    "region": "region",
    "eligibilityRequirements": "eligibility_requirements",
    "value": "value",
    "targetEntries": "target_entries",
    "startDate": "start_date",
    "endDate": "end_date",
    "isActive": "is_active",
    "isPopular": "is_popular",
    "isPremium": "is_premium",
    "isFeatured": "is_featured",
}


class GiveawayStatus(str, Enum):
    open = "OPEN"
    ended = "ENDED"
    decided = "DECIDED"


class GiveawayCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str
    imageUrl: str
    prize: str
    category: Category
    region: Region = Region.global_
    eligibilityRequirements: str
    value: str | None = None
    targetEntries: int | None = Field(default=None, ge=1)
    startDate: datetime
    endDate: datetime
    isActive: bool = True
    isPopular: bool = False
    isPremium: bool = False
    isFeatured: bool = False

    def to_record_fields(self) -> dict:
        return {GIVEAWAY_FIELDS[name]: value for name, value in self.model_dump().items()}


class GiveawayUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    imageUrl: str | None = None
    prize: str | None = None
    category: Category | None = None
    region: Region | None = None
    eligibilityRequirements: str | None = None
    value: str | None = None
    targetEntries: int | None = Field(default=None, ge=1)
    startDate: datetime | None = None
    endDate: datetime | None = None
    isActive: bool | None = None
    isPopular: bool | None = None
    isPremium: bool | None = None
    isFeatured: bool | None = None

    def to_record_fields(self) -> dict:
        # only what the client sent; explicit nulls clear the optional display fields
        return {GIVEAWAY_FIELDS[name]: value for name, value in self.model_dump(exclude_unset=True).items()}


class SelectWinnerRequest(BaseModel):
    testimonial: str | None = None
    location: str | None = None
