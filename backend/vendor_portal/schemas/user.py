from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, field_validator

Role = Literal["vendor", "finance", "admin"]


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Role

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class SignupResponse(BaseModel):
    message: str
    user: UserResponse
