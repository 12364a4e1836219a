from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class BookRecord(Base):
    __tablename__ = "books"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again
    __table_args__ = (UniqueConstraint("isbn", name="uq_books_isbn"), {"sqlite_autoincrement": True})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    isbn: Mapped[str] = mapped_column(String(13), nullable=False)
    published_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
