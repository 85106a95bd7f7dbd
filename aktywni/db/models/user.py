from sqlalchemy import Column, DateTime, Integer, String, func

from aktywni.db.base import Base
from aktywni.db.types import CredentialType

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    credential = Column(CredentialType(), nullable=False)
    role = Column(String(16), nullable=False, default=ROLE_USER)
    # Both set while a reset is pending, both NULL otherwise
    reset_token_hash = Column(String(64), nullable=True, index=True)
    reset_token_expires = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
