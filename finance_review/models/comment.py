"""
Review comment model.

Admin feedback on a change log entry. Append-only.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_review.models.base import Base
from finance_review.models.enums import CommentScope


class ChangeComment(Base):
    __tablename__ = "change_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    change_log_id: Mapped[int] = mapped_column(
        ForeignKey("change_logs.id"), nullable=False, index=True
    )
    author_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    scope: Mapped[CommentScope] = mapped_column(
        SAEnum(
            CommentScope,
            name="comment_scope_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=CommentScope.FIELD,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    change_log: Mapped["ChangeLog"] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<ChangeComment on {self.change_log_id} by {self.author_id}>"
