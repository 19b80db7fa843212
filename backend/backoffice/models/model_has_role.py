import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ModelHasRole(Base):
    __tablename__ = "model_has_roles"
    __table_args__ = (
        UniqueConstraint(
            "role_id", "model_id", "model_type", name="uq_model_has_roles_role_model"
        ),
        CheckConstraint("model_type IN ('admin', 'user')", name="ck_model_has_roles_model_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # polymorphic: references admins.id or users.id depending on model_type
    model_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    model_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
