# app/routes/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.models.profile import Profile
from app.schemas.profile import ProfileResponse, RoleUpdate, DeleteUsersRequest, DeleteUsersResult

router = APIRouter(
    prefix="/admin/users",
    tags=["Admin Users"]
)

logger = logging.getLogger(__name__)


def _delete_user(db: Session, user_id: str, acting_admin: Profile) -> None:
    if user_id == acting_admin.id:
        raise ValueError("You cannot delete your own account")
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise ValueError("User not found")
    try:
        db.delete(profile)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise ValueError(f"Failed to delete profile: {e}")
    logger.info(f"🗑️ User {user_id} deleted by {acting_admin.email}")


@router.get("/", response_model=List[ProfileResponse])
def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    query = db.query(Profile)
    if role:
        query = query.filter(Profile.role == role)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Profile.email).like(pattern),
            func.lower(Profile.full_name).like(pattern),
        ))
    return query.order_by(Profile.created_at.desc()).all()


@router.put("/{user_id}/role", response_model=ProfileResponse)
def change_role(
    user_id: str,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    profile.role = payload.role
    db.commit()
    db.refresh(profile)
    logger.info(f"Role of {profile.email} set to {payload.role} by {admin.email}")
    return profile


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    try:
        _delete_user(db, user_id, admin)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "message": "User deleted successfully"}


@router.post("/delete", response_model=DeleteUsersResult)
def delete_users(
    payload: DeleteUsersRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    """Bulk delete. One failure never stops the rest."""
    deleted_count = 0
    errors = []
    for user_id in payload.user_ids:
        try:
            _delete_user(db, user_id, admin)
            deleted_count += 1
        except ValueError as e:
            logger.error(f"Failed to delete user {user_id}: {e}")
            errors.append(f"{user_id}: {e}")
    return DeleteUsersResult(deleted_count=deleted_count, failed_count=len(errors), errors=errors)
