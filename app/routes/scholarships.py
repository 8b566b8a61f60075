# app/routes/scholarships.py
from typing import List, Optional, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Body
from pydantic import ValidationError
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.models.profile import Profile
from app.schemas.form_schema import FormSchema, FieldTemplate, FormTemplateInfo, BuilderOperationsRequest
from app.schemas.scholarship import ScholarshipCreate, ScholarshipUpdate, ScholarshipResponse, ScholarshipStats
from app.services import scholarship_service
from app.services.form_builder import FormSchemaEditor, apply_operation, check_operation_bounds, normalize_schema
from app.utils.field_library import FIELD_LIBRARY, DEFAULT_FORM_TEMPLATES, get_fields_by_category

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/scholarships",
    tags=["Scholarships"]
)

admin_router = APIRouter(
    prefix="/admin/scholarships",
    tags=["Admin Scholarships"]
)


def _get_or_404(db: Session, scholarship_id: str):
    scholarship = scholarship_service.get_scholarship(db, scholarship_id)
    if not scholarship:
        raise HTTPException(status_code=404, detail="Scholarship not found")
    return scholarship


# ✅ Public

@router.get("/", response_model=List[ScholarshipResponse])
def list_active(search: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if search and search.strip():
        return scholarship_service.search_scholarships(db, search)
    return scholarship_service.get_active_scholarships(db)


@router.get("/{scholarship_id}", response_model=ScholarshipResponse)
def get_scholarship(scholarship_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, scholarship_id)


# 🔐 Admin

@admin_router.get("/", response_model=List[ScholarshipResponse])
def list_all(db: Session = Depends(get_db), admin: Profile = Depends(get_current_admin)):
    return scholarship_service.get_all_scholarships(db)


@admin_router.get("/stats", response_model=ScholarshipStats)
def stats(db: Session = Depends(get_db), admin: Profile = Depends(get_current_admin)):
    return scholarship_service.get_scholarship_stats(db)


@admin_router.get("/field-library", response_model=List[FieldTemplate])
def field_library(category: Optional[str] = Query(None), admin: Profile = Depends(get_current_admin)):
    if category:
        return get_fields_by_category(category)
    return FIELD_LIBRARY


@admin_router.get("/form-templates", response_model=List[FormTemplateInfo])
def form_templates(admin: Profile = Depends(get_current_admin)):
    return [
        FormTemplateInfo(
            key=key,
            name=template["name"],
            description=template["description"],
            sections=template["schema"].model_copy(deep=True).sections,
        )
        for key, template in DEFAULT_FORM_TEMPLATES.items()
    ]


@admin_router.post("/", response_model=ScholarshipResponse, status_code=201)
def create(
    payload: ScholarshipCreate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    result = scholarship_service.create_scholarship(db, payload.model_dump(), created_by=admin.id)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.data


@admin_router.put("/{scholarship_id}", response_model=ScholarshipResponse)
def update(
    scholarship_id: str,
    payload: ScholarshipUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    scholarship = _get_or_404(db, scholarship_id)
    result = scholarship_service.update_scholarship(db, scholarship, payload.model_dump(exclude_unset=True))
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.data


@admin_router.delete("/{scholarship_id}")
def delete(
    scholarship_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    scholarship = _get_or_404(db, scholarship_id)
    result = scholarship_service.deactivate_scholarship(db, scholarship)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return {"success": True, "message": "Scholarship deactivated"}


# 📝 Form builder

@admin_router.get("/{scholarship_id}/form-schema", response_model=FormSchema)
def get_form_schema(
    scholarship_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    return scholarship_service.get_form_schema(_get_or_404(db, scholarship_id))


@admin_router.put("/{scholarship_id}/form-schema", response_model=FormSchema)
def put_form_schema(
    scholarship_id: str,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    scholarship = _get_or_404(db, scholarship_id)
    try:
        schema = FormSchema.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid form schema: {e.errors()[0]['msg']}")
    try:
        normalized = normalize_schema(schema)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result = scholarship_service.save_form_schema(db, scholarship, normalized)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return normalized


@admin_router.post("/{scholarship_id}/form-schema/ops", response_model=FormSchema)
def apply_form_operations(
    scholarship_id: str,
    payload: BuilderOperationsRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    """
    Apply builder operations in order and save the result.
    Nothing is saved unless every operation is valid.
    """
    scholarship = _get_or_404(db, scholarship_id)
    editor = FormSchemaEditor(scholarship_service.get_form_schema(scholarship))

    for position, operation in enumerate(payload.operations):
        op = operation.model_dump()
        problem = check_operation_bounds(editor.schema, op)
        if problem:
            raise HTTPException(status_code=400, detail=f"Operation {position} ({operation.op}): {problem}")
        try:
            apply_operation(editor, op)
        except (ValueError, KeyError, ValidationError) as e:
            raise HTTPException(status_code=400, detail=f"Operation {position} ({operation.op}): {e}")

    try:
        normalized = normalize_schema(editor.schema)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = scholarship_service.save_form_schema(db, scholarship, normalized)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return normalized
