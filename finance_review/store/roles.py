"""
Role lookups backed by the user_roles table.

The identity provider owns users; this table only records
which application role each user holds.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_review.exceptions import StorageError
from finance_review.models.enums import AppRole
from finance_review.models.user_role import UserRole


class SqlAlchemyRoleDirectory:

    def __init__(self, db: Session):
        self.db = db

    def get_role(self, user_id: str) -> AppRole | None:
        try:
            return self.db.execute(
                select(UserRole.role).where(UserRole.user_id == user_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to look up the role of {user_id}") from e

    def users_with_role(self, role: AppRole) -> list[str]:
        """Return the ids of every user holding a role."""
        try:
            user_ids = self.db.execute(
                select(UserRole.user_id)
                .where(UserRole.role == role)
                .order_by(UserRole.user_id)
            ).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to look up {role.value} users") from e
        return list(user_ids)

    def assign_role(self, user_id: str, role: AppRole) -> UserRole:
        """Give a user a role, replacing any role they already had."""
        user_role = self.db.execute(
            select(UserRole).where(UserRole.user_id == user_id)
        ).scalar_one_or_none()

        if user_role is None:
            user_role = UserRole(user_id=user_id, role=role)
            self.db.add(user_role)
        else:
            user_role.role = role

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to assign role to {user_id}") from e
        return user_role
