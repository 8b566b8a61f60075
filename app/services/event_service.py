# app/services/event_service.py
import logging
from datetime import date
from typing import Optional, List, Dict, Any

from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.event import Event, EventRegistration
from app.schemas.common import ServiceResult

logger = logging.getLogger(__name__)


def get_all_events(db: Session) -> List[Event]:
    return db.query(Event).order_by(Event.event_date.asc()).all()


def get_active_events(db: Session, today: Optional[date] = None) -> List[Event]:
    today = today or date.today()
    return db.query(Event).filter(
        Event.status == "active",
        Event.event_date >= today,
    ).order_by(Event.event_date.asc()).all()


def get_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.id == event_id).first()


def search_events(db: Session, query: str) -> List[Event]:
    pattern = f"%{query.strip().lower()}%"
    return db.query(Event).filter(
        Event.status == "active",
        or_(func.lower(Event.name).like(pattern), func.lower(Event.description).like(pattern)),
    ).order_by(Event.event_date.asc()).all()


def _save(db: Session, obj, action: str) -> ServiceResult:
    try:
        db.commit()
        db.refresh(obj)
        logger.info(f"📅 {action}: {obj.id}")
        return ServiceResult.ok(obj)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ {action} failed: {e}")
        return ServiceResult.fail(f"{action} failed")


def create_event(db: Session, values: Dict[str, Any], created_by: Optional[str]) -> ServiceResult:
    event = Event(**values, created_by=created_by)
    db.add(event)
    return _save(db, event, "Event created")


def update_event(db: Session, event: Event, changes: Dict[str, Any]) -> ServiceResult:
    for key, value in changes.items():
        setattr(event, key, value)
    return _save(db, event, "Event updated")


def cancel_event(db: Session, event: Event) -> ServiceResult:
    """Soft delete."""
    event.status = "cancelled"
    return _save(db, event, "Event cancelled")


# SECTION: registrations

def get_event_registrations(db: Session, event_id: str) -> List[EventRegistration]:
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event_id
    ).order_by(EventRegistration.registration_date.desc()).all()


def get_user_registrations(db: Session, user_id: str) -> List[EventRegistration]:
    return db.query(EventRegistration).filter(
        EventRegistration.user_id == user_id
    ).order_by(EventRegistration.registration_date.desc()).all()


def get_registration(db: Session, registration_id: str) -> Optional[EventRegistration]:
    return db.query(EventRegistration).filter(EventRegistration.id == registration_id).first()


def register_for_event(db: Session, event: Event, user_id: str, notes: Optional[str] = None,
                       today: Optional[date] = None) -> ServiceResult:
    today = today or date.today()
    if event.status != "active":
        return ServiceResult.fail("Event is not open for registration")
    if event.event_date < today:
        return ServiceResult.fail("Event has already taken place")

    existing = db.query(EventRegistration).filter(
        EventRegistration.event_id == event.id,
        EventRegistration.user_id == user_id,
    ).first()
    if existing is not None and existing.registration_status != "cancelled":
        return ServiceResult.fail("User is already registered for this event")

    # capacity 0 means unlimited
    if event.capacity and event.current_registrations >= event.capacity:
        return ServiceResult.fail("Event is full")

    if existing is not None:
        registration = existing
        registration.registration_status = "registered"
        registration.notes = notes
    else:
        registration = EventRegistration(event_id=event.id, user_id=user_id, notes=notes)
        db.add(registration)
    event.current_registrations = (event.current_registrations or 0) + 1
    return _save(db, registration, "Event registration created")


def update_registration(db: Session, registration: EventRegistration, changes: Dict[str, Any]) -> ServiceResult:
    previous = registration.registration_status
    new_status = changes.get("registration_status", previous)
    for key, value in changes.items():
        setattr(registration, key, value)
    event = registration.event
    if event is not None and previous != new_status:
        if new_status == "cancelled" and previous != "cancelled":
            event.current_registrations = max((event.current_registrations or 0) - 1, 0)
        elif previous == "cancelled":
            event.current_registrations = (event.current_registrations or 0) + 1
    return _save(db, registration, "Event registration updated")


def cancel_registration(db: Session, registration: EventRegistration) -> ServiceResult:
    if registration.registration_status == "cancelled":
        return ServiceResult.fail("Registration is already cancelled")
    return update_registration(db, registration, {"registration_status": "cancelled"})


def get_event_stats(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    events = db.query(Event.status, Event.capacity, Event.event_date).all()
    registrations = db.query(func.count(EventRegistration.id)).filter(
        EventRegistration.registration_status == "registered"
    ).scalar() or 0
    return {
        "total": len(events),
        "active": sum(1 for status, _, _ in events if status == "active"),
        "upcoming": sum(1 for status, _, event_date in events if status == "active" and event_date >= today),
        "total_registrations": registrations,
        "total_capacity": sum((capacity or 0) for _, capacity, _ in events),
    }
