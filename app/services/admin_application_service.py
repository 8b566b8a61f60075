# app/services/admin_application_service.py
import csv
import io
import logging
from datetime import date, datetime, time
from typing import Optional, List, Dict, Any, Tuple

from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.application import Application, APPLICATION_STATUSES
from app.schemas.common import ServiceResult

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Application ID", "Scholarship", "Applicant Name", "Email", "Phone", "City", "State",
    "School", "Major", "Graduation Year", "GPA", "Academic Level", "Status",
    "Application Date", "Awarded Amount", "Award Date",
]


def list_applications(db: Session, status: Optional[str] = None, scholarship_id: Optional[str] = None,
                      search: Optional[str] = None, date_from: Optional[date] = None,
                      date_to: Optional[date] = None) -> List[Application]:
    query = db.query(Application).options(joinedload(Application.scholarship))

    if status:
        query = query.filter(Application.status == status)
    if scholarship_id:
        query = query.filter(Application.scholarship_id == scholarship_id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Application.first_name).like(pattern),
            func.lower(Application.last_name).like(pattern),
            func.lower(Application.email).like(pattern),
            func.lower(Application.school).like(pattern),
            func.lower(Application.major).like(pattern),
        ))
    if date_from:
        query = query.filter(Application.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.filter(Application.created_at <= datetime.combine(date_to, time.max))

    return query.order_by(Application.created_at.desc()).all()


def _commit(db: Session, application: Application, action: str) -> ServiceResult:
    try:
        db.commit()
        db.refresh(application)
        logger.info(f"✅ Application {application.id}: {action}")
        return ServiceResult.ok(application)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Application {application.id}: {action} failed: {e}")
        return ServiceResult.fail(f"Failed to update application: {action}")


def update_application_status(db: Session, application: Application, status: str,
                              admin_notes: Optional[str] = None,
                              awarded_amount: Optional[float] = None,
                              awarded_date: Optional[date] = None) -> ServiceResult:
    if status not in APPLICATION_STATUSES:
        return ServiceResult.fail(f"Invalid status: {status}")

    application.status = status
    if awarded_amount is not None:
        application.awarded_amount = awarded_amount
    if awarded_date is not None:
        application.awarded_date = awarded_date
    if status == "awarded" and application.awarded_amount is not None and application.awarded_date is None:
        application.awarded_date = date.today()
    if admin_notes is not None:
        application.admin_notes = admin_notes
    return _commit(db, application, f"status -> {status}")


def award_application(db: Session, application: Application, amount: float,
                      awarded_date: Optional[date] = None, admin_notes: Optional[str] = None) -> ServiceResult:
    return update_application_status(
        db, application, "awarded",
        admin_notes=admin_notes,
        awarded_amount=amount,
        awarded_date=awarded_date or date.today(),
    )


def remove_award(db: Session, application: Application) -> ServiceResult:
    """Back to approved with both award fields cleared."""
    if application.status != "awarded" and application.awarded_amount is None:
        return ServiceResult.fail("Application has no award to remove")
    application.status = "approved"
    application.awarded_amount = None
    application.awarded_date = None
    return _commit(db, application, "award removed")


def bulk_update_status(db: Session, application_ids: List[str], status: str) -> Tuple[int, List[str]]:
    if status not in APPLICATION_STATUSES:
        return 0, list(application_ids)

    found = db.query(Application).filter(Application.id.in_(application_ids)).all()
    found_ids = {app.id for app in found}
    missing = [app_id for app_id in application_ids if app_id not in found_ids]

    try:
        for app in found:
            app.status = status
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Bulk status update failed: {e}")
        return 0, list(application_ids)

    logger.info(f"Bulk status update to {status}: {len(found)} updated, {len(missing)} not found")
    return len(found), missing


def get_application_stats(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    rows = db.query(Application.status, Application.awarded_amount, Application.created_at).all()

    stats: Dict[str, Any] = {status: 0 for status in APPLICATION_STATUSES}
    stats["total"] = len(rows)
    stats["total_awarded"] = 0.0
    stats["this_month"] = 0

    for status, awarded_amount, created_at in rows:
        if status in stats:
            stats[status] += 1
        if awarded_amount:
            stats["total_awarded"] += float(awarded_amount)
        if created_at is not None and created_at.year == today.year and created_at.month == today.month:
            stats["this_month"] += 1
    return stats


def _format_date(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def export_row(app: Application) -> Dict[str, Any]:
    return {
        "Application ID": app.id,
        "Scholarship": app.scholarship.name if app.scholarship else "N/A",
        "Applicant Name": f"{app.first_name or ''} {app.last_name or ''}".strip(),
        "Email": app.email or "",
        "Phone": app.phone or "",
        "City": app.city or "",
        "State": app.state or "",
        "School": app.school or "",
        "Major": app.major or "",
        "Graduation Year": app.graduation_year or "",
        "GPA": float(app.gpa) if app.gpa is not None else "N/A",
        "Academic Level": app.academic_level or "",
        "Status": app.status,
        "Application Date": _format_date(app.created_at),
        "Awarded Amount": f"${float(app.awarded_amount):g}" if app.awarded_amount else "N/A",
        "Award Date": _format_date(app.awarded_date),
    }


def export_applications_csv(db: Session, **filters) -> str:
    applications = list_applications(db, **filters)
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for app in applications:
        writer.writerow(export_row(app))
    logger.info(f"Exported {len(applications)} application(s) to CSV")
    return output.getvalue()
