from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(min_length=6)
    fullName: str = Field(min_length=1)
    country: str = Field(min_length=1)
    subscribedToNewsletter: bool = False


class LoginRequest(BaseModel):
    # username or email
    username: str
    password: str
