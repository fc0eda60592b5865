"""
User role model.

Maps an identity-provider user id to its application role.
Users are managed by the identity provider; this table only
answers "who holds which role".
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from finance_review.models.base import Base
from finance_review.models.enums import AppRole


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    role: Mapped[AppRole] = mapped_column(
        SAEnum(
            AppRole,
            name="app_role_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<UserRole {self.user_id} ({self.role.value})>"
