# app/models/event.py
from sqlalchemy import Column, String, Integer, Numeric, Text, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False)
    event_type = Column(String(30), nullable=False, default="other")
    capacity = Column(Integer, nullable=False, default=0)
    current_registrations = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    location = Column(String(255), nullable=True)
    registration_fee = Column(Numeric(10, 2), nullable=False, default=0)

    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    registrations = relationship("EventRegistration", back_populates="event", cascade="all, delete")


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_registrations_event_user"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    registration_status = Column(String(20), nullable=False, default="registered")
    payment_status = Column(String(20), nullable=False, default="pending")
    registration_date = Column(DateTime(timezone=True), server_default=func.now())
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="registrations")
    user = relationship("Profile", back_populates="registrations")
