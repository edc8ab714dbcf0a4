from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.models.base import Base, TimestampMixin


class Listing(TimestampMixin, Base):
    __tablename__ = "listings"
    # AUTOINCREMENT so ids are never reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # "rent" | "sale"
    listing_type: Mapped[str] = mapped_column(String, nullable=False)

    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
