# app/models/scholarship.py
from sqlalchemy import Column, String, Text, Numeric, Date, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Scholarship(Base):
    __tablename__ = "scholarships"
    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive', 'closed')", name="ck_scholarships_status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    extended_description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    deadline = Column(Date, nullable=True)
    requirements = Column(Text, nullable=True)
    eligibility_criteria = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=True)

    # Legacy flat field list, kept for backward compatibility
    custom_fields = Column(JSON, nullable=True)
    # Sectioned form definition used by the application wizard
    form_schema = Column(JSON, nullable=True)

    status = Column(String(20), nullable=False, default="active")
    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    applications = relationship("Application", back_populates="scholarship")
