from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Book(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    title: str
    author: str
    isbn: str
    published_date: Optional[date] = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})
