# app/routes/events.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_user, get_current_admin
from app.database import get_db
from app.models.profile import Profile
from app.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventStats,
    RegistrationCreate,
    RegistrationUpdate,
    RegistrationResponse,
)
from app.services import event_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/events",
    tags=["Events"]
)

admin_router = APIRouter(
    prefix="/admin/events",
    tags=["Admin Events"]
)


def _event_or_404(db: Session, event_id: str):
    event = event_service.get_event(db, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _registration_or_404(db: Session, registration_id: str):
    registration = event_service.get_registration(db, registration_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")
    return registration


# 📅 Public / applicant

@router.get("/", response_model=List[EventResponse])
def list_events(search: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if search and search.strip():
        return event_service.search_events(db, search)
    return event_service.get_active_events(db)


@router.get("/registrations/me", response_model=List[RegistrationResponse])
def my_registrations(db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return event_service.get_user_registrations(db, current_user.id)


@router.delete("/registrations/{registration_id}", response_model=RegistrationResponse)
def cancel_my_registration(
    registration_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    registration = _registration_or_404(db, registration_id)
    if registration.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not allowed to cancel this registration")
    result = event_service.cancel_registration(db, registration)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.data


@router.get("/{event_id}", response_model=EventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return _event_or_404(db, event_id)


@router.post("/{event_id}/register", response_model=RegistrationResponse, status_code=201)
def register(
    event_id: str,
    payload: RegistrationCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    event = _event_or_404(db, event_id)
    result = event_service.register_for_event(db, event, current_user.id, notes=payload.notes)
    if not result.success:
        status_code = 409 if result.error == "User is already registered for this event" else 400
        raise HTTPException(status_code=status_code, detail=result.error)
    return result.data


# 🔐 Admin

@admin_router.get("/", response_model=List[EventResponse])
def list_all_events(db: Session = Depends(get_db), admin: Profile = Depends(get_current_admin)):
    return event_service.get_all_events(db)


@admin_router.get("/stats", response_model=EventStats)
def event_stats(db: Session = Depends(get_db), admin: Profile = Depends(get_current_admin)):
    return event_service.get_event_stats(db)


@admin_router.post("/", response_model=EventResponse, status_code=201)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    result = event_service.create_event(db, payload.model_dump(), created_by=admin.id)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


@admin_router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    event = _event_or_404(db, event_id)
    result = event_service.update_event(db, event, payload.model_dump(exclude_unset=True))
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


@admin_router.delete("/{event_id}")
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    result = event_service.cancel_event(db, _event_or_404(db, event_id))
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return {"success": True, "message": "Event cancelled"}


@admin_router.get("/{event_id}/registrations", response_model=List[RegistrationResponse])
def event_registrations(
    event_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    _event_or_404(db, event_id)
    return event_service.get_event_registrations(db, event_id)


@admin_router.put("/registrations/{registration_id}", response_model=RegistrationResponse)
def update_registration(
    registration_id: str,
    payload: RegistrationUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    registration = _registration_or_404(db, registration_id)
    result = event_service.update_registration(db, registration, payload.model_dump(exclude_unset=True))
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data
