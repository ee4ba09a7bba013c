"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="supportdesk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Storage ==========
    storage_backend: str = Field(
        default="memory",
        description="Ticket store backend: 'database' or 'memory'"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/supportdesk",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)
    seed_default_users: bool = Field(
        default=True,
        description="Create the demo admin/agent/user accounts on an empty store"
    )

    # ========== Authentication ==========
    jwt_secret_key: str = Field(
        default="change-me-supportdesk-secret",
        description="Secret used to sign access tokens"
    )
    jwt_algorithm: str = Field(default="HS512", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(
        default=24 * 60,
        description="Access token lifetime in minutes",
        ge=1
    )

    # ========== Tickets & SLA ==========
    ticket_number_max_attempts: int = Field(
        default=5,
        description="Attempts to generate a unique ticket number before giving up",
        ge=1,
        le=50
    )
    sla_warning_threshold_percent: int = Field(
        default=25,
        description="Remaining percentage at or below which an SLA is at risk",
        ge=0,
        le=100
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

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Ensure the store backend is a known one."""
        allowed = {"database", "memory"}
        if v not in allowed:
            raise ValueError(f"storage_backend must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class UserRole(str, Enum):
    """Account roles."""
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"


class TicketPriority(str, Enum):
    """Ticket priority levels."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    CLOSED = "closed"


class ActivityAction(str, Enum):
    """Kinds of audit trail entries."""
    CREATED = "created"
    STATUS_CHANGE = "status_change"
    COMMENT = "comment"
    ASSIGNMENT = "assignment"
    UPDATED = "updated"


class SLAState(str, Enum):
    """Live SLA states."""
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    EXPIRED = "expired"
    COMPLETED = "completed"


# Roles that see and triage every ticket
STAFF_ROLES = (UserRole.AGENT, UserRole.ADMIN)
