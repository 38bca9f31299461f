from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, BigIntId, now_utc


class Role(Base):
    __tablename__ = 'roles'
    id = Column(BigIntId, primary_key=True, autoincrement=True)
    tenant_id = Column(BigIntId, ForeignKey('tenants.id'), nullable=True)
    name = Column(String(32), nullable=False)
    display_name = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_roles_tenant_name'),
    )


class UserRole(Base):
    __tablename__ = 'user_roles'
    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role_id = Column(BigIntId, ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    user = relationship('User', lazy='joined')
    role = relationship('Role', lazy='joined')

    __table_args__ = (
        UniqueConstraint('user_id', 'role_id', name='uq_user_roles_user_role'),
        Index('idx_user_roles_user_id', 'user_id'),
    )
