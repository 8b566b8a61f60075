# app/services/application_service.py
"""
Applicant-side persistence. Draft saves and submissions are upserted onto the
(scholarship_id, applicant_id) pair, so one applicant has at most one row per
scholarship and the most recent write wins.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.application import Application
from app.schemas.application import STANDARD_FIELD_NAMES
from app.schemas.common import ServiceResult

logger = logging.getLogger(__name__)

_INTEGER_FIELDS = {"graduation_year"}
_FLOAT_FIELDS = {"gpa"}


def clean_application_values(form_data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known columns only and coerce form strings into column types."""
    values: Dict[str, Any] = {}
    for name in STANDARD_FIELD_NAMES:
        if name not in form_data:
            continue
        value = form_data[name]
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                value = None
        if value is not None and name in _INTEGER_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                value = None
        elif value is not None and name in _FLOAT_FIELDS:
            try:
                value = float(value)
            except (TypeError, ValueError):
                value = None
            if value is not None and not math.isfinite(value):
                value = None
        values[name] = value
    if "custom_responses" in form_data:
        values["custom_responses"] = form_data.get("custom_responses") or {}
    return values


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def get_application_for_applicant(db: Session, scholarship_id: str, applicant_id: str) -> Optional[Application]:
    return db.query(Application).filter(
        Application.scholarship_id == scholarship_id,
        Application.applicant_id == applicant_id,
    ).first()


def upsert_application(db: Session, scholarship_id: str, applicant_id: str, values: Dict[str, Any]) -> ServiceResult:
    """INSERT ... ON CONFLICT (scholarship_id, applicant_id) DO UPDATE"""
    row = dict(values)
    row["scholarship_id"] = scholarship_id
    row["applicant_id"] = applicant_id

    try:
        insert = _dialect_insert(db)
        if insert is not None:
            stmt = insert(Application).values(**row)
            update_cols = {k: stmt.excluded[k] for k in row if k not in ("scholarship_id", "applicant_id")}
            update_cols["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(
                index_elements=["scholarship_id", "applicant_id"],
                set_=update_cols,
            )
            db.execute(stmt)
        else:
            existing = get_application_for_applicant(db, scholarship_id, applicant_id)
            if existing is None:
                db.add(Application(**row))
            else:
                for key, value in row.items():
                    setattr(existing, key, value)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Application upsert failed for scholarship {scholarship_id}, applicant {applicant_id}: {e}")
        return ServiceResult.fail("Failed to save application. Please try again.")

    application = get_application_for_applicant(db, scholarship_id, applicant_id)
    return ServiceResult.ok(application)


def save_application_draft(db: Session, scholarship_id: str, applicant_id: str, form_data: Dict[str, Any]) -> ServiceResult:
    values = clean_application_values(form_data)
    values["status"] = "draft"
    result = upsert_application(db, scholarship_id, applicant_id, values)
    if result.success:
        logger.info(f"💾 Draft saved for scholarship {scholarship_id} by {applicant_id}")
    return result


def submit_application(db: Session, scholarship_id: str, applicant_id: str, form_data: Dict[str, Any]) -> ServiceResult:
    values = clean_application_values(form_data)
    values["status"] = "submitted"
    values["submission_date"] = datetime.now(timezone.utc)
    result = upsert_application(db, scholarship_id, applicant_id, values)
    if result.success:
        logger.info(f"✅ Application submitted for scholarship {scholarship_id} by {applicant_id}")
    return result


def list_applications_for_applicant(db: Session, applicant_id: str) -> List[Application]:
    return db.query(Application).filter(
        Application.applicant_id == applicant_id
    ).order_by(Application.created_at.desc()).all()


def get_application(db: Session, application_id: str) -> Optional[Application]:
    return db.query(Application).filter(Application.id == application_id).first()
