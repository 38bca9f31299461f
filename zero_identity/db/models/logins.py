from sqlalchemy import Column, String, ForeignKey, Index, UniqueConstraint
from .base import Base, BigIntId


class UserLogin(Base):
    """External login (provider + provider key) linked to a local user."""
    __tablename__ = 'user_logins'
    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    login_provider = Column(String(128), nullable=False)
    provider_key = Column(String(256), nullable=False)

    __table_args__ = (
        UniqueConstraint('login_provider', 'provider_key', name='uq_user_logins_provider_key'),
        Index('idx_user_logins_user_id', 'user_id'),
    )
