from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings
import logging

# Set up logging
logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

# For Supabase/Neon hosted Postgres, ensure SSL is configured
if DATABASE_URL and ("supabase" in DATABASE_URL or "neon.tech" in DATABASE_URL):
    if "sslmode" not in DATABASE_URL:
        if "?" in DATABASE_URL:
            DATABASE_URL += "&sslmode=require"
        else:
            DATABASE_URL += "?sslmode=require"
        logger.info("Added sslmode=require to hosted database URL")

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
    )
else:
    try:
        engine = create_engine(
            DATABASE_URL,
            pool_pre_ping=True,  # Auto-reconnect on broken connections
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,     # Connection timeout in seconds
            pool_recycle=1800,   # Recycle connections after 30 minutes
        )
    except Exception as e:
        logger.error(f"❌ Database engine creation failed: {e}")
        raise

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Ensures models are registered on Base.metadata before Alembic autogenerate
from app import models  # noqa: E402,F401
