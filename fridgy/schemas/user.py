from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """Schema for creating the user documents after Firebase sign-up."""
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.]+$")
    email: EmailStr


class UsernameUpdate(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.]+$")


class UsernameAvailability(BaseModel):
    username: str
    available: bool
