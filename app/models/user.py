"""
User model for geofence owners
"""
import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.models.database import Base


class UserRole(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"


class AuthProvider(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    LOCAL = "local"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    profile_picture = Column(String(500), nullable=True)
    role = Column(SQLEnum(UserRole), default=UserRole.CLIENT, nullable=False, index=True)

    # Identity provider (the OAuth handshake itself happens upstream)
    provider = Column(SQLEnum(AuthProvider), default=AuthProvider.GOOGLE, nullable=False)
    provider_id = Column(String(255), nullable=True, index=True)

    is_active = Column(Boolean, default=True, index=True)
    is_email_verified = Column(Boolean, default=False)
    locale = Column(String(10), default="en")
    timezone = Column(String(64), default="UTC")

    last_login = Column(DateTime, nullable=True)
    login_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    geofences = relationship("Geofence", back_populates="owner")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User {self.email}>"
