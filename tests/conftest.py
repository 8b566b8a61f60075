import os
import tempfile
from datetime import date, timedelta

# Settings are read at import time, so the environment is fixed before any app import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_HOST"] = ""
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="scholarship-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.profile import Profile  # noqa: E402
from app.models.scholarship import Scholarship  # noqa: E402
from app.utils.jwt_handler import create_access_token  # noqa: E402
from app.utils.password import hash_password  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "password123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_profile(db, email, role="applicant", full_name="Test User"):
    profile = Profile(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        full_name=full_name,
        role=role,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def auth_headers(profile):
    token = create_access_token({"sub": profile.id, "role": profile.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db):
    return make_profile(db, "admin@example.com", role="admin", full_name="Admin User")


@pytest.fixture
def applicant_user(db):
    return make_profile(db, "jane.doe@example.com", full_name="Jane Doe")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def applicant_headers(applicant_user):
    return auth_headers(applicant_user)


@pytest.fixture
def scholarship(db, admin_user):
    record = Scholarship(
        name="Forestry Futures Scholarship",
        description="Support for students entering the forest products industry",
        amount=2500,
        deadline=date.today() + timedelta(days=30),
        requirements="Enrolled in a forestry program",
        status="active",
        created_by=admin_user.id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def complete_form_data():
    """Every built-in field filled so that each built-in step passes."""
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
        "phone": "(541) 555-0142",
        "address": "42 Cedar Lane",
        "city": "Eureka",
        "state": "CA",
        "zip": "95501",
        "date_of_birth": "2004-05-17",
        "school": "Cal Poly Humboldt",
        "graduation_year": date.today().year + 1,
        "gpa": 3.6,
        "major": "Forestry",
        "academic_level": "undergraduate",
        "career_goals": "I plan to become a registered professional forester working on restoration.",
        "financial_need": "Tuition and field gear are beyond my budget.",
        "community_involvement": "I volunteer with the local watershed council.",
        "why_deserve_scholarship": "I am committed to the timber communities I grew up in.",
        "work_experience": "Summer crew member on a thinning project",
        "extracurricular_activities": "",
        "awards_and_honors": "",
    }
