"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="maintenance-logbook", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/logbook",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA Configuration ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to per-category SLA configuration YAML file"
    )

    # ========== Attachments ==========
    upload_dir: Path = Field(
        default=Path("uploads"),
        description="Directory where complaint images are written"
    )
    max_images_per_complaint: int = Field(
        default=5,
        description="Maximum number of images attached to one complaint",
        ge=0
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Category(str):
    """Maintenance complaint categories."""
    ELECTRICITY = "electricity"
    WATER = "water"
    WIFI = "wifi"
    CLEANING = "cleaning"


class ComplaintStatus(str):
    """Complaint lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class Priority(str):
    """Complaint priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Role(str):
    """Principal roles."""
    RESIDENT = "resident"
    ADMIN = "admin"
    TECHNICIAN = "technician"


# Hours a complaint may stay unresolved before it is escalated
DEFAULT_SLA_HOURS = {
    Category.ELECTRICITY: 4,
    Category.WATER: 2,
    Category.WIFI: 6,
    Category.CLEANING: 12,
}

# Display name recorded on update records written by admins
ADMIN_DISPLAY_NAME = "Admin"

# Note recorded when a complaint is resolved without one
DEFAULT_RESOLUTION_MESSAGE = "Issue resolved."


# ========== Lists for validation ==========

VALID_CATEGORIES = [
    Category.ELECTRICITY, Category.WATER,
    Category.WIFI, Category.CLEANING
]
VALID_STATUSES = [
    ComplaintStatus.OPEN, ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED
]
VALID_PRIORITIES = [Priority.LOW, Priority.MEDIUM, Priority.HIGH]
VALID_ROLES = [Role.RESIDENT, Role.ADMIN, Role.TECHNICIAN]

# Statuses a status update may move a complaint into
UPDATABLE_STATUSES = [ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED]
