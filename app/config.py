from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List
import os

class Settings(BaseSettings):
    # === DATABASE ===
    DATABASE_URL: str = Field(default=os.environ.get("DATABASE_URL", "sqlite:///./scholarship_portal.db"), description="Database URL (PostgreSQL in production)")

    # === JWT AUTH ===
    SECRET_KEY: str = Field(default=os.environ.get("SECRET_KEY", "change-me"), description="Secret key for JWT token signing")
    ALGORITHM: str = Field(default=os.environ.get("ALGORITHM", "HS256"), description="JWT algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 30)), description="JWT token expiration time in minutes")

    # === EMAIL ===
    EMAIL_HOST: str = Field(default=os.environ.get("EMAIL_HOST", ""), description="SMTP host, empty to simulate delivery")
    EMAIL_PORT: int = Field(default=int(os.environ.get("EMAIL_PORT", 587)), description="SMTP port")
    EMAIL_HOST_USER: str = Field(default=os.environ.get("EMAIL_HOST_USER", ""), description="SMTP username")
    EMAIL_HOST_PASSWORD: str = Field(default=os.environ.get("EMAIL_HOST_PASSWORD", ""), description="SMTP password")
    EMAIL_FROM: str = Field(default=os.environ.get("EMAIL_FROM", "scholarships@rrlc.org"), description="Email sender address")
    EMAIL_FROM_NAME: str = Field(default=os.environ.get("EMAIL_FROM_NAME", "RRLC Scholarships"), description="Email sender display name")
    ORGANIZATION_NAME: str = Field(default=os.environ.get("ORGANIZATION_NAME", "Redwood Region Logging Conference"), description="Organisation named in outgoing email")
    ORGANIZATION_SHORT_NAME: str = Field(default=os.environ.get("ORGANIZATION_SHORT_NAME", "RRLC"), description="Short organisation name")

    # === UPLOADS ===
    UPLOAD_DIR: str = Field(default=os.environ.get("UPLOAD_DIR", "static/uploads"), description="Directory for uploaded application documents")
    MAX_UPLOAD_SIZE: int = Field(default=5 * 1024 * 1024, description="Maximum upload size in bytes")

    # === CSV IMPORT ===
    CSV_IMPORT_BATCH_SIZE: int = Field(default=50, description="Rows per insert batch during CSV import")

    # === CORS ===
    CORS_ORIGINS: str = Field(default=os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"), description="Comma separated list of allowed origins")

    # === SERVER ===
    HOST: str = Field(default=os.environ.get("HOST", "0.0.0.0"), description="Bind address for run.py")
    PORT: int = Field(default=int(os.environ.get("PORT", 8000)), description="Port, set by the hosting platform")

    # === DEBUG MODE ===
    DEBUG: bool = Field(default=os.environ.get("DEBUG", "True").lower() == "true", description="Debug mode")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.EMAIL_HOST)

    class Config:
        env_file = ".env"
        case_sensitive = False

# Create settings instance
settings = Settings()
