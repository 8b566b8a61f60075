# app/routes/admin_applications.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, UploadFile, File, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.models.profile import Profile
from app.schemas.application import (
    ApplicationListItem,
    ApplicationStatus,
    ApplicationStats,
    AwardRequest,
    BulkStatusResult,
    BulkStatusUpdate,
    StatusUpdate,
)
from app.schemas.csv_import import ImportPreview, ImportResult
from app.services import admin_application_service, application_service
from app.services.csv_import import CSVParseError, preview_import, run_import, generate_csv_template
from app.services.email_service import send_status_change_email, send_award_notification

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/applications",
    tags=["Admin Applications"]
)


def _get_or_404(db: Session, application_id: str):
    application = application_service.get_application(db, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


def _notify_status_change(background_tasks: BackgroundTasks, application) -> None:
    background_tasks.add_task(
        send_status_change_email,
        application.email,
        application.applicant_name or "Applicant",
        application.scholarship_name or "Scholarship",
        application.status,
        application.id,
    )


async def _read_csv(file: UploadFile) -> bytes:
    if file.filename and not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Please upload a CSV file")
    return await file.read()


@router.get("/", response_model=List[ApplicationListItem])
def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    scholarship_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    return admin_application_service.list_applications(
        db,
        status=status.value if status else None,
        scholarship_id=scholarship_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/stats", response_model=ApplicationStats)
def stats(db: Session = Depends(get_db), admin: Profile = Depends(get_current_admin)):
    return admin_application_service.get_application_stats(db)


@router.get("/export")
def export_csv(
    status: Optional[ApplicationStatus] = Query(None),
    scholarship_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    content = admin_application_service.export_applications_csv(
        db,
        status=status.value if status else None,
        scholarship_id=scholarship_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    filename = f"applications_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# 📥 CSV import

@router.get("/import/template")
def import_template(admin: Profile = Depends(get_current_admin)):
    return Response(
        content=generate_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="application_import_template.csv"'},
    )


@router.post("/import/preview", response_model=ImportPreview)
async def import_preview(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    content = await _read_csv(file)
    try:
        return preview_import(db, content)
    except CSVParseError as e:
        raise HTTPException(status_code=400, detail=e.errors)


@router.post("/import", response_model=ImportResult)
async def import_applications(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    content = await _read_csv(file)
    try:
        result = run_import(db, content)
    except CSVParseError as e:
        raise HTTPException(status_code=400, detail=e.errors)
    logger.info(f"📥 CSV import by {admin.email}: {result.success_count} imported, {result.error_count} errors")
    return result


# ✏️ Status and awards

@router.post("/bulk-status", response_model=BulkStatusResult)
def bulk_status(
    payload: BulkStatusUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    updated, missing = admin_application_service.bulk_update_status(
        db, payload.application_ids, payload.status.value
    )
    return BulkStatusResult(updated_count=updated, failed_ids=missing)


@router.get("/{application_id}", response_model=ApplicationListItem)
def application_detail(
    application_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    return _get_or_404(db, application_id)


@router.put("/{application_id}/status", response_model=ApplicationListItem)
def update_status(
    application_id: str,
    payload: StatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    application = _get_or_404(db, application_id)
    previous_status = application.status
    result = admin_application_service.update_application_status(
        db, application,
        payload.status.value,
        admin_notes=payload.admin_notes,
        awarded_amount=payload.awarded_amount,
        awarded_date=payload.awarded_date,
    )
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    if result.data.status != previous_status:
        _notify_status_change(background_tasks, result.data)
    return result.data


@router.post("/{application_id}/award", response_model=ApplicationListItem)
def award(
    application_id: str,
    payload: AwardRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    application = _get_or_404(db, application_id)
    result = admin_application_service.award_application(
        db, application, payload.awarded_amount,
        awarded_date=payload.awarded_date,
        admin_notes=payload.admin_notes,
    )
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    awarded = result.data
    background_tasks.add_task(
        send_award_notification,
        awarded.email,
        awarded.applicant_name or "Applicant",
        awarded.scholarship_name or "Scholarship",
        awarded.awarded_amount,
        awarded.id,
    )
    return awarded


@router.delete("/{application_id}/award", response_model=ApplicationListItem)
def remove_award(
    application_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    application = _get_or_404(db, application_id)
    result = admin_application_service.remove_award(db, application)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.data
