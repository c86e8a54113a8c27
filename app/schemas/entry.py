from pydantic import BaseModel


class EntryCreate(BaseModel):
    giveawayId: int
    userId: int | None = None


class EntryWithReferralCreate(EntryCreate):
    referralCode: str | None = None
