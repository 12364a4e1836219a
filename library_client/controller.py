import logging
import re
import threading
from datetime import date
from functools import partial
from typing import Callable, Optional, Protocol, Sequence

from .gateway import ApiError, BookApiClient
from .models import Book

logger = logging.getLogger("library_client.controller")

ISBN_PATTERN = re.compile(r"[0-9]{10}|[0-9]{13}")


class FormError(ValueError):
    pass


class Dispatcher(Protocol):
    def submit(self, work: Callable, on_success: Callable, on_error: Callable[[Exception], None]) -> None: ...


class CatalogView(Protocol):
    def schedule(self, callback: Callable[[], None]) -> None: ...

    def show_books(self, books: Sequence[Book], selected_id: Optional[int]) -> None: ...

    def show_form(self, book: Book) -> None: ...

    def read_form(self) -> tuple[str, str, str, str]: ...

    def clear_form(self) -> None: ...

    def clear_selection(self) -> None: ...

    def set_selection_actions(self, enabled: bool) -> None: ...

    def show_info(self, title: str, message: str) -> None: ...

    def show_warning(self, title: str, message: str) -> None: ...

    def show_error(self, title: str, message: str) -> None: ...

    def confirm(self, title: str, message: str) -> bool: ...


def filter_books(books: Sequence[Book], query: Optional[str]) -> list[Book]:
    """Case-insensitive substring match over title and author, order preserved."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(books)
    return [book for book in books if needle in book.title.lower() or needle in book.author.lower()]


def validate_form(title: str, author: str, isbn: str, published: str) -> Book:
    title, author, isbn, published = title.strip(), author.strip(), isbn.strip(), published.strip()
    if not title:
        raise FormError("Title is required")
    if not author:
        raise FormError("Author is required")
    if not isbn:
        raise FormError("ISBN is required")
    if not ISBN_PATTERN.fullmatch(isbn):
        raise FormError("ISBN must be 10 or 13 digits")

    published_date = None
    if published:
        try:
            published_date = date.fromisoformat(published)
        except ValueError:
            raise FormError("Published date must be in YYYY-MM-DD format") from None
    return Book(title=title, author=author, isbn=isbn, published_date=published_date)


class ThreadDispatcher:
    """Runs each call on its own daemon thread and hands the outcome to ``schedule``."""

    def __init__(self, schedule: Callable[[Callable[[], None]], None]):
        self.schedule = schedule

    def submit(self, work: Callable, on_success: Callable, on_error: Callable[[Exception], None]) -> None:
        def run() -> None:
            try:
                result = work()
            except Exception as exc:  # noqa: BLE001
                self.schedule(partial(on_error, exc))
                return
            self.schedule(partial(on_success, result))

        threading.Thread(target=run, daemon=True).start()


class CatalogController:
    """Owns the book list, the search text and the current selection.

    All state changes happen inside callbacks delivered on the UI thread, so no locking is needed.
    """

    def __init__(self, view: CatalogView, gateway: BookApiClient, dispatcher: Dispatcher):
        self.view = view
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.books: list[Book] = []
        self.query = ""
        self.selected: Optional[Book] = None
        self._load_generation = 0

    @property
    def visible_books(self) -> list[Book]:
        return filter_books(self.books, self.query)

    def start(self) -> None:
        self.view.set_selection_actions(False)
        self.load_books()

    def load_books(self) -> None:
        self._load_generation += 1
        generation = self._load_generation

        def loaded(books: list[Book]) -> None:
            if generation != self._load_generation:
                logger.debug("client.load_superseded", extra={"generation": generation})
                return
            self.books = list(books)
            self._render()

        self.dispatcher.submit(self.gateway.list_books, loaded, self._failure("Failed to load books"))

    def search(self, query: str) -> None:
        self.query = query
        self._render()

    def select(self, book_id: Optional[int]) -> None:
        # the view reports its selection after every redraw; re-selecting the same row must not reset the form
        if self.selected is not None and self.selected.id == book_id:
            return
        book = next((b for b in self.books if b.id == book_id), None) if book_id is not None else None
        if book is None:
            if self.selected is not None:
                self.clear()
            return
        self.selected = book
        self.view.show_form(book)
        self.view.set_selection_actions(True)

    def add(self) -> None:
        book = self._book_from_form()
        if book is None:
            return

        def created(new_book: Book) -> None:
            self.books.append(new_book)
            self.clear()
            self._render()
            self.view.show_info("Success", "Book added successfully")

        self.dispatcher.submit(lambda: self.gateway.create_book(book), created, self._failure("Failed to add book"))

    def update(self) -> None:
        if self.selected is None:
            self.view.show_warning("No Selection", "Please select a book to update")
            return
        book = self._book_from_form()
        if book is None:
            return
        book_id = self.selected.id

        def updated(new_book: Book) -> None:
            self.books = [new_book if b.id == book_id else b for b in self.books]
            self.clear()
            self._render()
            self.view.show_info("Success", "Book updated successfully")

        self.dispatcher.submit(
            lambda: self.gateway.update_book(book_id, book), updated, self._failure("Failed to update book")
        )

    def delete(self) -> None:
        if self.selected is None:
            self.view.show_warning("No Selection", "Please select a book to delete")
            return
        if not self.view.confirm("Confirm Delete", "Are you sure you want to delete this book?"):
            return
        book_id = self.selected.id

        def deleted(_result) -> None:
            self.books = [b for b in self.books if b.id != book_id]
            self.clear()
            self._render()
            self.view.show_info("Success", "Book deleted successfully")

        self.dispatcher.submit(lambda: self.gateway.delete_book(book_id), deleted, self._failure("Failed to delete book"))

    def clear(self) -> None:
        self.selected = None
        self.view.clear_form()
        self.view.clear_selection()
        self.view.set_selection_actions(False)

    def _render(self) -> None:
        visible = self.visible_books
        if self.selected is not None:
            current = next((b for b in visible if b.id == self.selected.id), None)
            if current is None:
                self.clear()
            else:
                self.selected = current
        self.view.show_books(visible, self.selected.id if self.selected is not None else None)

    def _book_from_form(self) -> Optional[Book]:
        try:
            return validate_form(*self.view.read_form())
        except FormError as exc:
            self.view.show_warning("Validation Error", str(exc))
            return None

    def _failure(self, title: str) -> Callable[[Exception], None]:
        def failed(exc: Exception) -> None:
            if isinstance(exc, ApiError):
                message = exc.message
            else:
                logger.exception("client.unexpected_error", exc_info=exc)
                message = "An unexpected error occurred"
            self.view.show_error(title, message)

        return failed
