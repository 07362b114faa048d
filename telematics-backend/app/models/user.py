"""
Users referenced by alert rules as creators, updaters and recipients.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import Base


class UserRole(Base):
    __tablename__ = "user_role"

    user_role_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128))
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)


class User(Base):
    __tablename__ = "user"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customer_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("customer.customer_id"), nullable=True, index=True)
    assigned_account_ids: Mapped[list] = mapped_column(JSONB, default=list)
    user_role_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("user_role.user_role_id"), nullable=True)

    user_role_ref: Mapped[UserRole | None] = relationship("UserRole")
