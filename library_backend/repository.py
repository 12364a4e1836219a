from typing import Optional

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from .entities import BookRecord


class BookRepository:
    """Data-access layer for the ``books`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, record: BookRecord) -> BookRecord:
        self.session.add(record)
        self.session.flush()
        return record

    def find_all(self) -> list[BookRecord]:
        return list(self.session.execute(select(BookRecord)).scalars().all())

    def find_by_id(self, book_id: int) -> Optional[BookRecord]:
        return self.session.get(BookRecord, book_id)

    def exists_by_id(self, book_id: int) -> bool:
        return bool(self.session.scalar(select(exists().where(BookRecord.id == book_id))))

    def exists_by_isbn(self, isbn: str) -> bool:
        return bool(self.session.scalar(select(exists().where(BookRecord.isbn == isbn))))

    def exists_by_isbn_excluding_id(self, isbn: str, book_id: int) -> bool:
        stmt = select(exists().where(BookRecord.isbn == isbn, BookRecord.id != book_id))
        return bool(self.session.scalar(stmt))

    def delete_by_id(self, book_id: int) -> None:
        record = self.session.get(BookRecord, book_id)
        if record is not None:
            self.session.delete(record)
            self.session.flush()

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(BookRecord)) or 0
