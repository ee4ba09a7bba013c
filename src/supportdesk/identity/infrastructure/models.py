"""
Identity Infrastructure Models
===============================

SQLAlchemy ORM models for accounts.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from supportdesk.config import UserRole
from supportdesk.infrastructure.database import Base


class UserModel(Base):
    """
    Database model for User entity.

    Maps to the 'users' table.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(150), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.USER.value, index=True)
