from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class UserBase(BaseModel):
    user_name: str
    email_address: str
    name: Optional[str] = None
    surname: Optional[str] = None


class UserCreate(UserBase):
    tenant_id: Optional[int] = None
    is_email_confirmed: bool = False
    # Already-hashed password, if any
    password: Optional[str] = None


class User(UserBase):
    id: int
    tenant_id: Optional[int] = None
    is_email_confirmed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
