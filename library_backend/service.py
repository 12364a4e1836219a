import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .entities import BookRecord
from .errors import BookNotFoundError, DuplicateIsbnError
from .models import Book, BookIn
from .repository import BookRepository

logger = logging.getLogger("library_backend.service")


class BookService:
    def __init__(self, session: Session):
        self.session = session
        self.books = BookRepository(session)

    def list(self) -> list[Book]:
        return [self._to_schema(record) for record in self.books.find_all()]

    def create(self, payload: BookIn) -> Book:
        self._ensure_isbn_free(payload.isbn)
        record = BookRecord(**payload.model_dump())
        self._write(payload.isbn, lambda: self.books.save(record))
        self.session.refresh(record)
        logger.info("book.created", extra={"book_id": record.id, "isbn": record.isbn})
        return self._to_schema(record)

    def get(self, book_id: int) -> Book:
        return self._to_schema(self._find_or_raise(book_id))

    def update(self, book_id: int, payload: BookIn) -> Book:
        record = self._find_or_raise(book_id)
        # only an ISBN change needs the uniqueness check
        if record.isbn != payload.isbn:
            self._ensure_isbn_free(payload.isbn)

        def apply() -> None:
            for field, value in payload.model_dump().items():
                setattr(record, field, value)
            self.books.save(record)

        self._write(payload.isbn, apply)
        self.session.refresh(record)
        logger.info("book.updated", extra={"book_id": record.id, "isbn": record.isbn})
        return self._to_schema(record)

    def delete(self, book_id: int) -> None:
        if not self.books.exists_by_id(book_id):
            raise BookNotFoundError(book_id)
        self.books.delete_by_id(book_id)
        self.session.commit()
        logger.info("book.deleted", extra={"book_id": book_id})

    def _find_or_raise(self, book_id: int) -> BookRecord:
        record = self.books.find_by_id(book_id)
        if record is None:
            raise BookNotFoundError(book_id)
        return record

    def _ensure_isbn_free(self, isbn: str) -> None:
        if self.books.exists_by_isbn(isbn):
            logger.info("book.duplicate_isbn", extra={"isbn": isbn})
            raise DuplicateIsbnError(isbn)

    def _write(self, isbn: str, work) -> None:
        # The unique constraint catches a concurrent writer that slipped past the existence check.
        try:
            work()
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("book.duplicate_isbn", extra={"isbn": isbn})
            raise DuplicateIsbnError(isbn) from exc

    @staticmethod
    def _to_schema(record: BookRecord) -> Book:
        return Book.model_validate(record, from_attributes=True)
