"""
Survey Backend — AdminUser SQLAlchemy Model
============================================

What:  ORM model for the `users` table: administrators allowed to log in.
Why:   usuario and email are unique; the store enforces it with named
       constraints so the gateway can report which field collided.

Security Note:
    Only a bcrypt hash of the password is stored (see app/passwords.py).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AdminUser(Base):
    """
    An administrator account.

    Created only through POST /api/register with the shared secret; read by
    POST /api/login. Never updated or deleted through the API.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    usuario: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    fecha_registro: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("usuario", name="uq_users_usuario"),
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        return f"<AdminUser(id={self.id}, usuario='{self.usuario}')>"
