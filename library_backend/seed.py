import logging
from datetime import date

from sqlalchemy.orm import Session

from .entities import BookRecord
from .repository import BookRepository

logger = logging.getLogger("library_backend.seed")

SAMPLE_BOOKS = (
    ("Clean Code", "Robert C. Martin", "9780132350884", date(2008, 8, 1)),
    ("The Pragmatic Programmer", "Andrew Hunt", "9780135957059", date(2019, 9, 13)),
    ("Design Patterns", "Erich Gamma", "9780201633610", date(1994, 10, 31)),
    ("Effective Java", "Joshua Bloch", "9780134685991", date(2017, 12, 27)),
    ("Refactoring", "Martin Fowler", "9780134757599", date(2018, 11, 20)),
)


def seed_sample_books(session: Session) -> int:
    """Insert the sample catalog into an empty table. Returns the number of rows added."""
    books = BookRepository(session)
    if books.count() > 0:
        logger.info("seed.skipped", extra={"reason": "table not empty"})
        return 0

    for title, author, isbn, published in SAMPLE_BOOKS:
        books.save(BookRecord(title=title, author=author, isbn=isbn, published_date=published))
    session.commit()
    logger.info("seed.done", extra={"count": len(SAMPLE_BOOKS)})
    return len(SAMPLE_BOOKS)
