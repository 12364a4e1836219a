from fastapi import status


class CatalogError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookNotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, book_id: int):
        super().__init__(f"Book not found with id: {book_id}")
        self.book_id = book_id


class DuplicateIsbnError(CatalogError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, isbn: str):
        super().__init__(f"ISBN already exists: {isbn}")
        self.isbn = isbn
