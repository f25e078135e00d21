from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.security import UserRole

class AccountCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)

class UserLogin(BaseModel):
    username: str
    password: str
    role: UserRole

class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    role: UserRole
    created_at: Optional[datetime] = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    username: str
    role: UserRole
