# app/schemas/application.py
from enum import Enum
from datetime import date, datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    AWARDED = "awarded"


class ApplicationData(BaseModel):
    """Flat, wizard-facing application fields. Everything is optional while drafting."""
    # SECTION A: Personal Information
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    date_of_birth: Optional[str] = None

    # SECTION B: Academic Information
    school: Optional[str] = None
    graduation_year: Optional[int] = None
    gpa: Optional[float] = None
    major: Optional[str] = None
    academic_level: Optional[str] = None

    # SECTION C: Essays
    career_goals: Optional[str] = None
    financial_need: Optional[str] = None
    community_involvement: Optional[str] = None
    why_deserve_scholarship: Optional[str] = None

    # SECTION D: Additional Information
    work_experience: Optional[str] = None
    extracurricular_activities: Optional[str] = None
    awards_and_honors: Optional[str] = None

    custom_responses: Optional[Dict[str, Any]] = None


APPLICATION_FIELD_NAMES = list(ApplicationData.model_fields.keys())
STANDARD_FIELD_NAMES = [name for name in APPLICATION_FIELD_NAMES if name != "custom_responses"]


class ApplicationResponse(ApplicationData):
    id: str
    scholarship_id: str
    applicant_id: Optional[str] = None
    status: ApplicationStatus
    submission_date: Optional[datetime] = None
    awarded_amount: Optional[float] = None
    awarded_date: Optional[date] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, title="ApplicationResponse")


class ApplicationListItem(ApplicationResponse):
    scholarship_name: Optional[str] = None


class WizardStep(BaseModel):
    id: str
    title: str
    description: str = ""
    fields: List[str] = []


class WizardState(BaseModel):
    scholarship_id: str
    current_step: int
    steps: List[WizardStep]
    progress: float
    is_review_step: bool
    form_data: Dict[str, Any]
    errors: Dict[str, str] = {}
    status: ApplicationStatus = ApplicationStatus.DRAFT


class StepValidationRequest(BaseModel):
    step_index: int
    form_data: Dict[str, Any] = Field(default_factory=dict)


class StepValidationResponse(BaseModel):
    step_index: int
    valid: bool
    errors: Dict[str, str]
    next_step: int
    progress: float


class DocumentResponse(BaseModel):
    id: str
    application_id: str
    field_name: str
    file_url: str
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# SECTION: admin-side payloads

class StatusUpdate(BaseModel):
    status: ApplicationStatus
    admin_notes: Optional[str] = None
    awarded_amount: Optional[float] = None
    awarded_date: Optional[date] = None


class AwardRequest(BaseModel):
    awarded_amount: float = Field(gt=0)
    awarded_date: Optional[date] = None
    admin_notes: Optional[str] = None


class BulkStatusUpdate(BaseModel):
    application_ids: List[str]
    status: ApplicationStatus


class BulkStatusResult(BaseModel):
    updated_count: int
    failed_ids: List[str] = []


class ApplicationStats(BaseModel):
    total: int = 0
    draft: int = 0
    submitted: int = 0
    under_review: int = 0
    approved: int = 0
    rejected: int = 0
    awarded: int = 0
    total_awarded: float = 0
    this_month: int = 0
