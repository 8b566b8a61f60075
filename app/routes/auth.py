# app/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models.profile import Profile
from app.schemas.profile import SignupRequest, LoginRequest, Token, ProfileResponse, ProfileUpdate
from app.utils.jwt_handler import create_access_token
from app.utils.password import hash_password, verify_password

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

logger = logging.getLogger(__name__)


def _issue_token(profile: Profile) -> Token:
    token = create_access_token(data={"sub": profile.id, "email": profile.email, "role": profile.role})
    return Token(access_token=token, role=profile.role)


@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()
    logger.info(f"Signup started for: {normalized_email}")

    existing = db.query(Profile).filter(func.lower(Profile.email) == normalized_email).first()
    if existing:
        logger.warning(f"Email already exists: {normalized_email}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    profile = Profile(
        email=normalized_email,
        hashed_password=hash_password(payload.password),
        full_name=payload.full_name,
        role="applicant",
    )
    try:
        db.add(profile)
        db.commit()
        db.refresh(profile)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Signup failed for {normalized_email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create account")

    logger.info(f"✅ Profile created: {profile.id}")
    return _issue_token(profile)


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()
    profile = db.query(Profile).filter(func.lower(Profile.email) == normalized_email).first()
    if not profile or not verify_password(payload.password, profile.hashed_password):
        logger.warning(f"Failed login for {normalized_email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(profile)


@router.get("/me", response_model=ProfileResponse)
def read_me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=ProfileResponse)
def update_me(
    changes: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    for key, value in changes.model_dump(exclude_unset=True).items():
        setattr(current_user, key, value)
    try:
        db.commit()
        db.refresh(current_user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Profile update failed for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update profile")
    return current_user
