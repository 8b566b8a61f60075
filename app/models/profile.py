# app/models/profile.py
from sqlalchemy import Column, String, Text, Date, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    full_name = Column(String(200), nullable=True)
    preferred_name = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default="applicant")  # admin | applicant | reviewer

    phone = Column(String(30), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(200), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    website_url = Column(String(500), nullable=True)
    notification_preferences = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    applications = relationship("Application", back_populates="applicant", cascade="all, delete")
    registrations = relationship("EventRegistration", back_populates="user", cascade="all, delete")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
