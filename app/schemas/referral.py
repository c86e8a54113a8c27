from pydantic import BaseModel, Field


class ReferralCodeCreate(BaseModel):
    userId: int | None = None
    code: str | None = Field(default=None, max_length=120)


class ReferralCodePatch(BaseModel):
    isActive: bool
