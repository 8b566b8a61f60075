# app/services/scholarship_service.py
import logging
from datetime import date
from typing import Optional, List, Dict, Any

from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.scholarship import Scholarship
from app.schemas.common import ServiceResult
from app.schemas.form_schema import FormSchema
from app.services.form_builder import resolve_form_schema

logger = logging.getLogger(__name__)

SCHOLARSHIP_STATUSES = ("active", "inactive", "closed")


def check_scholarship_rules(values: Dict[str, Any], today: Optional[date] = None) -> Optional[str]:
    """Return a message when the scholarship cannot be saved as given."""
    today = today or date.today()
    if "name" in values and not (values.get("name") or "").strip():
        return "Scholarship name is required"
    if "description" in values and not (values.get("description") or "").strip():
        return "Description is required"
    status = values.get("status")
    if status is not None and status not in SCHOLARSHIP_STATUSES:
        return f"Invalid status: {status}"
    deadline = values.get("deadline")
    if status == "active" and deadline is not None and deadline < today:
        return ("Cannot activate scholarship with a past due date. "
                "Please update the deadline or set status to inactive.")
    return None


def get_all_scholarships(db: Session) -> List[Scholarship]:
    return db.query(Scholarship).order_by(Scholarship.created_at.desc()).all()


def get_active_scholarships(db: Session) -> List[Scholarship]:
    return db.query(Scholarship).filter(
        Scholarship.status == "active"
    ).order_by(Scholarship.deadline.asc()).all()


def get_scholarship(db: Session, scholarship_id: str) -> Optional[Scholarship]:
    return db.query(Scholarship).filter(Scholarship.id == scholarship_id).first()


def search_scholarships(db: Session, query: str) -> List[Scholarship]:
    pattern = f"%{query.strip().lower()}%"
    return db.query(Scholarship).filter(
        Scholarship.status == "active",
        or_(
            func.lower(Scholarship.name).like(pattern),
            func.lower(Scholarship.description).like(pattern),
            func.lower(Scholarship.requirements).like(pattern),
        ),
    ).order_by(Scholarship.deadline.asc()).all()


def create_scholarship(db: Session, values: Dict[str, Any], created_by: Optional[str]) -> ServiceResult:
    problem = check_scholarship_rules(values)
    if problem:
        return ServiceResult.fail(problem)
    try:
        scholarship = Scholarship(**values, created_by=created_by)
        db.add(scholarship)
        db.commit()
        db.refresh(scholarship)
        logger.info(f"🎓 Scholarship created: {scholarship.name} ({scholarship.id})")
        return ServiceResult.ok(scholarship)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error creating scholarship: {e}")
        return ServiceResult.fail("Failed to create scholarship")


def update_scholarship(db: Session, scholarship: Scholarship, changes: Dict[str, Any]) -> ServiceResult:
    merged = {
        "status": changes.get("status", scholarship.status),
        "deadline": changes.get("deadline", scholarship.deadline),
    }
    merged.update({k: v for k, v in changes.items() if k in ("name", "description")})
    problem = check_scholarship_rules(merged)
    if problem:
        return ServiceResult.fail(problem)
    try:
        for key, value in changes.items():
            setattr(scholarship, key, value)
        db.commit()
        db.refresh(scholarship)
        return ServiceResult.ok(scholarship)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error updating scholarship {scholarship.id}: {e}")
        return ServiceResult.fail("Failed to update scholarship")


def deactivate_scholarship(db: Session, scholarship: Scholarship) -> ServiceResult:
    """Soft delete: the row and its applications stay, the scholarship stops accepting applications."""
    try:
        scholarship.status = "inactive"
        db.commit()
        logger.info(f"Scholarship {scholarship.id} set to inactive")
        return ServiceResult.ok(scholarship)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error deleting scholarship {scholarship.id}: {e}")
        return ServiceResult.fail("Failed to delete scholarship")


def get_scholarship_stats(db: Session) -> Dict[str, Any]:
    rows = db.query(Scholarship.status, Scholarship.amount).all()
    return {
        "total": len(rows),
        "active": sum(1 for status, _ in rows if status == "active"),
        "inactive": sum(1 for status, _ in rows if status == "inactive"),
        "total_amount": float(sum((amount or 0) for _, amount in rows)),
    }


# SECTION: form schema

def get_form_schema(scholarship: Scholarship) -> FormSchema:
    """Editable schema, migrating legacy custom fields on the way out."""
    return resolve_form_schema(scholarship.form_schema, scholarship.custom_fields)


def save_form_schema(db: Session, scholarship: Scholarship, schema: FormSchema) -> ServiceResult:
    """Persist the sectioned schema. Legacy custom_fields are left as they are."""
    try:
        scholarship.form_schema = schema.to_json()
        db.commit()
        db.refresh(scholarship)
        logger.info(f"📝 Form schema saved for scholarship {scholarship.id} ({len(schema.sections)} sections)")
        return ServiceResult.ok(scholarship)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error saving form schema for {scholarship.id}: {e}")
        return ServiceResult.fail("Failed to save form schema")
