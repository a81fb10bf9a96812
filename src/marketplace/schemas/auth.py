"""Pydantic schemas for registration, login and the current user.

Learn: Pydantic v2 models validate request data. Custom validators raise
PydanticCustomError so the 422 response carries a plain, human message
("Please enter your name") instead of pydantic's generic wording.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

# Column widths in db/models.py. EmailStr already caps addresses at 254.
MAX_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 32


class RegisterRequest(BaseModel):
    name: str = Field(max_length=MAX_NAME_LENGTH)
    email: EmailStr
    password: str
    phone: str = Field("", max_length=MAX_PHONE_LENGTH)

    @field_validator("name")
    @classmethod
    def name_long_enough(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_NAME_LENGTH:
            raise PydanticCustomError("name", "Please enter your name")
        return value

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password", "Password must be at least 6 characters"
            )
        return value

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, value: str) -> str:
        return value.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password", "Please enter Password")
        return value


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    id: int
    name: str
    phone: str
    email: str

    model_config = {"from_attributes": True}
