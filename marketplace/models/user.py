from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # stored exactly as submitted; trimming is only used for validation
    name: Mapped[str] = mapped_column(String, nullable=False)
