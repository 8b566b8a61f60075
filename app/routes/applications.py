# app/routes/applications.py
from typing import List, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, UploadFile, File, Form, Body
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models.document import ApplicationDocument
from app.models.profile import Profile
from app.schemas.application import (
    ApplicationResponse,
    ApplicationListItem,
    DocumentResponse,
    StepValidationRequest,
    StepValidationResponse,
    WizardState,
)
from app.services import application_service, scholarship_service
from app.services.wizard import ApplicationWizard
from app.utils.upload import validate_file, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/applications",
    tags=["Applications"]
)


def _wizard_for(db: Session, scholarship_id: str, user: Profile, accepting_only: bool = False) -> ApplicationWizard:
    scholarship = scholarship_service.get_scholarship(db, scholarship_id)
    if not scholarship:
        raise HTTPException(status_code=404, detail="Scholarship not found")
    if accepting_only and scholarship.status != "active":
        raise HTTPException(status_code=400, detail="This scholarship is not accepting applications")
    wizard = ApplicationWizard(scholarship, user.id, db)
    # Pre-fill from the signed-in account
    if not wizard.get_value("email"):
        wizard.update_field("email", user.email)
    return wizard


def _owned_application(db: Session, application_id: str, user: Profile):
    application = application_service.get_application(db, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    if application.applicant_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Not allowed to access this application")
    return application


# 🧭 Wizard

@router.get("/wizard/{scholarship_id}", response_model=WizardState)
def wizard_state(
    scholarship_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    """Steps for this scholarship plus the applicant's saved draft, if any."""
    return _wizard_for(db, scholarship_id, current_user).state()


@router.post("/wizard/{scholarship_id}/validate", response_model=StepValidationResponse)
def validate_step(
    scholarship_id: str,
    payload: StepValidationRequest,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    wizard = _wizard_for(db, scholarship_id, current_user)
    if not wizard.go_to_step(payload.step_index):
        raise HTTPException(status_code=400, detail=f"Step index out of range: {payload.step_index}")
    wizard.update_fields(payload.form_data)
    advanced = wizard.next_step()
    return StepValidationResponse(
        step_index=payload.step_index,
        valid=advanced,
        errors=wizard.errors,
        next_step=wizard.current_step,
        progress=wizard.progress(),
    )


@router.put("/wizard/{scholarship_id}/draft", response_model=ApplicationResponse)
def save_draft(
    scholarship_id: str,
    form_data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    wizard = _wizard_for(db, scholarship_id, current_user, accepting_only=True)
    wizard.update_fields(form_data)
    result = wizard.save_draft()
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


@router.post("/wizard/{scholarship_id}/submit", response_model=ApplicationResponse)
def submit(
    scholarship_id: str,
    background_tasks: BackgroundTasks,
    form_data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    wizard = _wizard_for(db, scholarship_id, current_user, accepting_only=True)
    wizard.update_fields(form_data)

    # Over HTTP nothing gates the Next button, so every step is checked here
    for index in range(len(wizard.steps) - 1):
        errors = wizard.validate_step(index)
        if errors:
            raise HTTPException(status_code=400, detail={"step_index": index, "errors": errors})

    result = wizard.submit(background_tasks)
    if not result.success:
        raise HTTPException(status_code=500, detail=wizard.submit_error)
    return result.data


# 📄 Applicant's own applications

@router.get("/me", response_model=List[ApplicationListItem])
def my_applications(db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return application_service.list_applications_for_applicant(db, current_user.id)


@router.get("/{application_id}", response_model=ApplicationListItem)
def application_detail(
    application_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return _owned_application(db, application_id, current_user)


@router.get("/{application_id}/documents", response_model=List[DocumentResponse])
def list_documents(
    application_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return _owned_application(db, application_id, current_user).documents


@router.post("/{application_id}/documents", response_model=DocumentResponse, status_code=201)
async def upload_document(
    application_id: str,
    field_name: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    application = _owned_application(db, application_id, current_user)

    content = await file.read()
    is_valid, message = validate_file(file.content_type, len(content))
    if not is_valid:
        raise HTTPException(status_code=400, detail=message)

    path = save_upload(file, f"applications/{application.id}", content, prefix=field_name)
    document = ApplicationDocument(
        application_id=application.id,
        field_name=field_name,
        file_url=path.replace("\\", "/"),
        file_name=file.filename or "upload",
        file_size=len(content),
        mime_type=file.content_type,
    )
    try:
        db.add(document)
        db.commit()
        db.refresh(document)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to record document for application {application.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save document")

    logger.info(f"📎 Document {document.file_name} uploaded for application {application.id}")
    return document
