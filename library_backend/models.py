import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

ISBN_PATTERN = re.compile(r"[0-9]{10}|[0-9]{13}")


def _require_text(value: Optional[str], label: str, max_length: int) -> str:
    if value is None or not value.strip():
        raise PydanticCustomError("blank", f"{label} is required")
    if len(value) > max_length:
        raise PydanticCustomError("too_long", f"{label} must not exceed {max_length} characters")
    return value


class BookFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    title: str
    author: str
    isbn: str
    published_date: Optional[date] = None


class BookIn(BookFields):
    """Create/update body. Any ``id`` sent by the caller is ignored.

    Title, author and ISBN default to ``None`` so a missing or null value reaches
    the validators and gets the same "... is required" message as a blank one.
    """

    title: Optional[str] = Field(default=None, validate_default=True)
    author: Optional[str] = Field(default=None, validate_default=True)
    isbn: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> str:
        return _require_text(value, "Title", 200)

    @field_validator("author")
    @classmethod
    def check_author(cls, value: Optional[str]) -> str:
        return _require_text(value, "Author", 100)

    @field_validator("isbn")
    @classmethod
    def check_isbn(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise PydanticCustomError("blank", "ISBN is required")
        if not ISBN_PATTERN.fullmatch(value):
            raise PydanticCustomError("isbn_format", "ISBN must be 10 or 13 digits")
        return value

    @field_validator("published_date")
    @classmethod
    def check_published_date(cls, value: Optional[date]) -> Optional[date]:
        if value is not None and value > date.today():
            raise PydanticCustomError("future_date", "Published date cannot be in the future")
        return value


class Book(BookFields):
    id: int


class ErrorResponse(BaseModel):
    status: int
    message: str
    errors: Optional[dict[str, str]] = None
    timestamp: datetime
