from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from .base import Base, BigIntId, now_utc


class User(Base):
    __tablename__ = 'users'
    id = Column(BigIntId, primary_key=True, autoincrement=True)
    # NULL tenant means a host (tenant-less) user
    tenant_id = Column(BigIntId, ForeignKey('tenants.id'), nullable=True)
    user_name = Column(String(32), nullable=False)
    name = Column(String(32), nullable=True)
    surname = Column(String(32), nullable=True)
    email_address = Column(String(256), nullable=False)
    is_email_confirmed = Column(Boolean, nullable=False, default=False)
    # Precomputed hash; hashing happens in the caller
    password = Column(String(128), nullable=True)
    email_confirmation_code = Column(String(128), nullable=True)
    password_reset_code = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'user_name', name='uq_users_tenant_user_name'),
        Index('idx_users_email_address', 'email_address'),
    )

    def __repr__(self):
        return f"<User id={self.id} tenant_id={self.tenant_id} user_name={self.user_name!r}>"
