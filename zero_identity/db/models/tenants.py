from sqlalchemy import Column, String, DateTime, Boolean
from .base import Base, BigIntId, now_utc


class Tenant(Base):
    __tablename__ = 'tenants'
    id = Column(BigIntId, primary_key=True, autoincrement=True)
    tenancy_name = Column(String(64), nullable=False, unique=True)
    name = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
