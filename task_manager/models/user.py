"""User model."""

from uuid import uuid4

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from task_manager.database import Base
from task_manager.models.base import TimestampMixin


def new_user_id() -> str:
    return str(uuid4())


class User(TimestampMixin, Base):
    """Registered account. The password hash never leaves the service."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_user_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # Bumping this invalidates every token minted with an older value.
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
