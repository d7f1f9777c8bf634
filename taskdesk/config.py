"""
Application configuration management using Pydantic Settings.
"""
from pydantic_settings import BaseSettings
from typing import Optional
from dotenv import load_dotenv
import os

load_dotenv()

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "TaskDesk"
    APP_ENV: str = "development"
    DEBUG: bool = True
    PORT: int = 8000

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./taskdesk.db")

    # Auth0 (token verification)
    AUTH0_DOMAIN: Optional[str] = os.getenv("AUTH0_DOMAIN")
    AUTH0_AUDIENCE: Optional[str] = os.getenv("AUTH0_AUDIENCE")
    AUTH0_ALGORITHMS: str = "RS256"

    # Auth0 Management API (identity provisioning)
    AUTH0_MANAGEMENT_CLIENT_ID: Optional[str] = os.getenv("AUTH0_MANAGEMENT_CLIENT_ID")
    AUTH0_MANAGEMENT_CLIENT_SECRET: Optional[str] = os.getenv("AUTH0_MANAGEMENT_CLIENT_SECRET")
    AUTH0_MANAGEMENT_API_AUDIENCE: Optional[str] = os.getenv("AUTH0_MANAGEMENT_API_AUDIENCE")
    AUTH0_CONNECTION: str = os.getenv("AUTH0_CONNECTION", "Username-Password-Authentication")
    AUTH0_TIMEOUT: float = float(os.getenv("AUTH0_TIMEOUT", "10.0"))

    # Users created by an admin get this password until they reset it
    DEFAULT_USER_PASSWORD: str = os.getenv("DEFAULT_USER_PASSWORD", "change-me-on-first-login")
    EMPLOYEE_ID_START: int = 20000

    # Frontend
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8080")

    # File Uploads
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "files")
    FILES_BASE_URL: str = os.getenv("FILES_BASE_URL", "")
    MAX_TASK_FILES: int = 10
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
