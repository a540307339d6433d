"""
User model.

WHY: Sellers, directors and admins log in to price proposals. The role
decides who may grant director discounts and who may edit the shared
price and commission tables.
"""

import enum
from sqlalchemy import Column, String, Enum, Boolean

from pricing_api.models.base import Base, TimestampMixin, PrimaryKeyMixin


class UserRole(str, enum.Enum):
    """User role enumeration."""

    ADMIN = "admin"  # Edits price/commission tables
    DIRECTOR = "director"  # Grants director discounts
    USER = "user"  # Seller


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """User model representing a person who uses the calculators."""

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # WHY: values_callable stores the lowercase value, native_enum=False keeps
    # the column a plain VARCHAR so SQLite and PostgreSQL behave the same
    role = Column(
        Enum(
            UserRole,
            name="userrole",
            native_enum=False,
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=UserRole.USER,
    )

    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
