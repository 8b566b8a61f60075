# app/services/wizard.py
"""
Multi-step application wizard.

Steps come from one of three places, in order of preference:
  1. the scholarship's sectioned form_schema (one step per section)
  2. the built-in steps plus a "custom" step for legacy custom_fields
  3. the built-in steps alone
A review step with no fields always comes last.
"""
import logging
from datetime import date
from typing import Optional, List, Dict, Any, Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from app.models.scholarship import Scholarship
from app.schemas.application import WizardStep, WizardState, STANDARD_FIELD_NAMES
from app.schemas.common import ServiceResult
from app.schemas.form_schema import FormField, FormSchema
from app.services import application_service
from app.services.email_service import send_application_confirmation
from app.utils.validators import validate_standard_fields, validate_custom_fields

logger = logging.getLogger(__name__)

STEP_STANDARD = "standard"
STEP_SCHEMA = "schema"
STEP_CUSTOM = "custom"
STEP_REVIEW = "review"

REVIEW_STEP = WizardStep(
    id="review",
    title="Review & Submit",
    description="Review your application before submitting",
    fields=[],
)

APPLICATION_STEPS: List[WizardStep] = [
    WizardStep(
        id="personal",
        title="Personal Information",
        description="Tell us about yourself",
        fields=["first_name", "last_name", "email", "phone", "address", "city", "state", "zip", "date_of_birth"],
    ),
    WizardStep(
        id="academic",
        title="Academic Background",
        description="Share your educational journey",
        fields=["school", "graduation_year", "gpa", "major", "academic_level"],
    ),
    WizardStep(
        id="essays",
        title="Essay Questions",
        description="Help us understand your goals and motivations",
        fields=["career_goals", "financial_need", "community_involvement", "why_deserve_scholarship"],
    ),
    WizardStep(
        id="additional",
        title="Additional Information",
        description="Share more about your experiences",
        fields=["work_experience", "extracurricular_activities", "awards_and_honors"],
    ),
    REVIEW_STEP,
]


def _legacy_fields(custom_fields: Optional[List[Any]]) -> List[FormField]:
    return [f if isinstance(f, FormField) else FormField.model_validate(f) for f in (custom_fields or [])]


def derive_steps(form_schema: Optional[Dict[str, Any]], custom_fields: Optional[List[Any]]) -> List[WizardStep]:
    if form_schema and form_schema.get("sections") is not None:
        schema = FormSchema.model_validate(form_schema)
        steps = [
            WizardStep(
                id=section.id,
                title=section.title,
                description=section.description,
                fields=[f.id for f in sorted(section.fields, key=lambda f: f.order)],
            )
            for section in sorted(schema.sections, key=lambda s: s.order)
        ]
        return steps + [REVIEW_STEP.model_copy(deep=True)]

    legacy = _legacy_fields(custom_fields)
    steps = [step.model_copy(deep=True) for step in APPLICATION_STEPS]
    if legacy:
        custom_step = WizardStep(
            id="custom",
            title="Additional Information",
            description="Scholarship-specific questions",
            fields=[f.id for f in legacy],
        )
        # Goes in front of the last built-in step (review), i.e. after "additional"
        steps.insert(len(steps) - 1, custom_step)
    return steps


def initial_form_data(scholarship_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    current_year = (today or date.today()).year
    data: Dict[str, Any] = {name: "" for name in STANDARD_FIELD_NAMES}
    data.update({
        "scholarship_id": scholarship_id,
        "graduation_year": current_year + 1,
        "gpa": None,
        "academic_level": "undergraduate",
        "custom_responses": {},
        "status": "draft",
    })
    return data


class ApplicationWizard:
    def __init__(self, scholarship: Scholarship, applicant_id: str, db: Session,
                 today: Optional[date] = None,
                 on_success: Optional[Callable[[ServiceResult], None]] = None):
        self.scholarship = scholarship
        self.applicant_id = applicant_id
        self.db = db
        self.today = today
        self.on_success = on_success

        self.steps = derive_steps(scholarship.form_schema, scholarship.custom_fields)
        self._schema = FormSchema.model_validate(scholarship.form_schema) if self._uses_schema else None
        self._legacy = _legacy_fields(scholarship.custom_fields) if not self._uses_schema else []

        self.current_step = 0
        self.errors: Dict[str, str] = {}
        self.is_submitted = False
        self.submit_error: Optional[str] = None
        self.form_data = initial_form_data(scholarship.id, today)
        self._load_draft()

    @property
    def _uses_schema(self) -> bool:
        schema = self.scholarship.form_schema
        return bool(schema) and schema.get("sections") is not None

    def _load_draft(self) -> None:
        existing = application_service.get_application_for_applicant(self.db, self.scholarship.id, self.applicant_id)
        if existing is None:
            return
        for name in STANDARD_FIELD_NAMES:
            value = getattr(existing, name)
            if value is not None:
                self.form_data[name] = float(value) if name == "gpa" else value
        self.form_data["custom_responses"] = dict(existing.custom_responses or {})
        self.form_data["status"] = existing.status
        # The stored row never overrides which scholarship this wizard is for
        self.form_data["scholarship_id"] = self.scholarship.id
        logger.info(f"📄 Loaded existing application {existing.id} into wizard")

    # --- field lookup ---

    def _custom_field_map(self) -> Dict[str, FormField]:
        if self._schema is not None:
            return {f.id: f for s in self._schema.sections for f in s.fields}
        return {f.id: f for f in self._legacy}

    def get_value(self, name: str) -> Any:
        if name in STANDARD_FIELD_NAMES:
            return self.form_data.get(name)
        return self.form_data["custom_responses"].get(name)

    def update_field(self, name: str, value: Any) -> None:
        if name in STANDARD_FIELD_NAMES:
            self.form_data[name] = value
        elif name in self._custom_field_map():
            self.form_data["custom_responses"][name] = value
        else:
            logger.warning(f"Ignoring unknown application field: {name}")
            return
        self.errors.pop(name, None)

    def update_fields(self, values: Dict[str, Any]) -> None:
        for name, value in (values or {}).items():
            if name == "custom_responses" and isinstance(value, dict):
                for field_id, answer in value.items():
                    self.update_field(field_id, answer)
            elif name in ("scholarship_id", "status"):
                continue
            else:
                self.update_field(name, value)

    # --- validation ---

    def step_kind(self, index: int) -> str:
        step = self.steps[index]
        if step.id == "review" and not step.fields and index == len(self.steps) - 1:
            return STEP_REVIEW
        if self._schema is not None:
            return STEP_SCHEMA
        if step.id == "custom" and self._legacy:
            return STEP_CUSTOM
        return STEP_STANDARD

    def validate_step(self, index: int) -> Dict[str, str]:
        step = self.steps[index]
        kind = self.step_kind(index)
        if kind == STEP_REVIEW:
            errors = {}
        elif kind == STEP_STANDARD:
            errors = validate_standard_fields(step.fields, self.form_data, self.today)
        else:
            field_map = self._custom_field_map()
            fields = [field_map[field_id] for field_id in step.fields if field_id in field_map]
            responses = {f.id: self.get_value(f.id) for f in fields}
            errors = validate_custom_fields(fields, responses)
        self.errors = errors
        return errors

    # --- navigation ---

    def next_step(self) -> bool:
        if self.validate_step(self.current_step):
            return False
        self.current_step = min(self.current_step + 1, len(self.steps) - 1)
        return True

    def prev_step(self) -> None:
        self.current_step = max(self.current_step - 1, 0)

    def go_to_step(self, index: int) -> bool:
        """Jump without re-validating the steps in between."""
        if 0 <= index < len(self.steps):
            self.current_step = index
            return True
        return False

    def progress(self) -> float:
        return (self.current_step + 1) / len(self.steps) * 100

    @property
    def is_first_step(self) -> bool:
        return self.current_step == 0

    @property
    def is_review_step(self) -> bool:
        return self.current_step == len(self.steps) - 1

    # --- persistence ---

    def save_draft(self) -> ServiceResult:
        result = application_service.save_application_draft(
            self.db, self.scholarship.id, self.applicant_id, self.form_data
        )
        if result.success:
            self.form_data["status"] = "draft"
        return result

    def submit(self, background_tasks: Optional[BackgroundTasks] = None) -> ServiceResult:
        """Persist as submitted. Step validity is trusted from the Next gating."""
        self.submit_error = None
        result = application_service.submit_application(
            self.db, self.scholarship.id, self.applicant_id, self.form_data
        )
        if not result.success:
            self.submit_error = result.error or "Failed to submit application. Please try again."
            return result

        self.is_submitted = True
        self.form_data["status"] = "submitted"
        application = result.data

        if background_tasks is not None and application is not None:
            background_tasks.add_task(
                send_application_confirmation,
                application.email,
                application.applicant_name or "Applicant",
                self.scholarship.name,
                application.id,
            )
        else:
            logger.info("No background task runner supplied; confirmation email not scheduled")

        if self.on_success is not None:
            self.on_success(result)
        return result

    def state(self) -> WizardState:
        return WizardState(
            scholarship_id=self.scholarship.id,
            current_step=self.current_step,
            steps=self.steps,
            progress=self.progress(),
            is_review_step=self.is_review_step,
            form_data=self.form_data,
            errors=self.errors,
            status=self.form_data.get("status", "draft"),
        )
