from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .user import UserOut

ReadingStatus = Literal["Want to Read", "Currently Reading", "Read", "DNF"]
ReviewFormat = Literal["Hardcover", "Paperback", "E-book", "Audiobook", "Other"]
Currency = Literal["USD", "EUR", "GBP", "CAD", "AUD", "JPY", "INR"]

_CAMEL_TO_COLUMN = {
    "spoilerAlert": "spoiler_alert",
    "readingStatus": "reading_status",
    "purchaseSource": "purchase_source",
    "readDate": "read_date",
}


class _ReviewFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_columns(self, exclude: set[str] | None = None) -> dict:
        """Only fields the client actually sent, keyed by column name."""
        data = self.model_dump(exclude_unset=True, exclude=exclude)
        return {_CAMEL_TO_COLUMN.get(key, key): value for key, value in data.items()}


class CreateReviewRequest(_ReviewFields):
    bookId: int
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)
    spoilerAlert: bool = False
    readingStatus: ReadingStatus = "Read"
    format: ReviewFormat = "Paperback"
    purchaseSource: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    currency: Currency = "USD"
    readDate: datetime | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)


class UpdateReviewRequest(_ReviewFields):
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1, max_length=5000)
    spoilerAlert: bool | None = None
    readingStatus: ReadingStatus | None = None
    format: ReviewFormat | None = None
    purchaseSource: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    currency: Currency | None = None
    readDate: datetime | None = None
    tags: list[str] | None = Field(default=None, max_length=20)


class VoteStateOut(BaseModel):
    count: int
    isSetByMe: bool = False


class ReviewOut(BaseModel):
    id: str
    user: UserOut
    bookId: str
    rating: int
    title: str
    content: str
    spoilerAlert: bool = False
    readingStatus: str
    format: str
    purchaseSource: str | None = None
    price: float | None = None
    currency: str
    readDate: str | None = None
    tags: list[str] = []
    helpful: VoteStateOut
    likes: VoteStateOut
    createdAt: str | None = None
    timestamp: str


class ToggleOut(BaseModel):
    count: int
    isSetByUser: bool
