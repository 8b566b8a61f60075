# app/models/application.py
from sqlalchemy import (
    Column, String, Integer, Numeric, Text, Date, DateTime, JSON, ForeignKey,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid

APPLICATION_STATUSES = ("draft", "submitted", "under_review", "approved", "rejected", "awarded")


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        # Drafts and submissions are upserted onto this key
        UniqueConstraint("scholarship_id", "applicant_id", name="uq_applications_scholarship_applicant"),
        CheckConstraint(
            "status IN ('draft', 'submitted', 'under_review', 'approved', 'rejected', 'awarded')",
            name="ck_applications_status",
        ),
        CheckConstraint("gpa IS NULL OR (gpa >= 0 AND gpa <= 4)", name="ck_applications_gpa_range"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    scholarship_id = Column(String(36), ForeignKey("scholarships.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null for rows bulk-loaded from CSV
    applicant_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="draft")
    submission_date = Column(DateTime(timezone=True), nullable=True)

    # SECTION A: Personal Information
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    date_of_birth = Column(String(20), nullable=True)

    # SECTION B: Academic Information
    school = Column(String(255), nullable=True)
    graduation_year = Column(Integer, nullable=True)
    gpa = Column(Numeric(3, 2), nullable=True)
    major = Column(String(255), nullable=True)
    academic_level = Column(String(30), nullable=True)

    # SECTION C: Essay Responses
    career_goals = Column(Text, nullable=True)
    financial_need = Column(Text, nullable=True)
    community_involvement = Column(Text, nullable=True)
    why_deserve_scholarship = Column(Text, nullable=True)

    # SECTION D: Additional Information
    work_experience = Column(Text, nullable=True)
    extracurricular_activities = Column(Text, nullable=True)
    awards_and_honors = Column(Text, nullable=True)

    # SECTION E: Schema-driven and legacy custom answers keyed by field id
    custom_responses = Column(JSON, nullable=True)

    # SECTION F: Award Information
    awarded_amount = Column(Numeric(12, 2), nullable=True)
    awarded_date = Column(Date, nullable=True)
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    scholarship = relationship("Scholarship", back_populates="applications")
    applicant = relationship("Profile", back_populates="applications")
    documents = relationship("ApplicationDocument", back_populates="application", cascade="all, delete")

    @property
    def applicant_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def scholarship_name(self):
        return self.scholarship.name if self.scholarship else None
