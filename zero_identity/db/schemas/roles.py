from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class RoleBase(BaseModel):
    name: str
    display_name: Optional[str] = None


class RoleCreate(RoleBase):
    tenant_id: Optional[int] = None


class Role(RoleBase):
    id: int
    tenant_id: Optional[int] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
