from pydantic import BaseModel, ConfigDict, Field

_CAMEL_TO_COLUMN = {
    "publicationYear": "publication_year",
    "pageCount": "page_count",
    "coverImage": "cover_image",
}


class BookOut(BaseModel):
    id: str
    title: str
    author: str
    description: str | None = None
    genre: str | None = None
    isbn: str | None = None
    publicationYear: int | None = None
    publisher: str | None = None
    pageCount: int | None = None
    coverImage: str | None = None
    averageRating: float = 0.0
    totalRatings: int = 0


class RatingSummaryOut(BaseModel):
    averageRating: float
    totalRatings: int


class GenreCountOut(BaseModel):
    genre: str
    count: int


class _BookFields(BaseModel):
    # Derived rating fields are not accepted from clients.
    model_config = ConfigDict(extra="forbid")

    def to_columns(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        return {_CAMEL_TO_COLUMN.get(key, key): value for key, value in data.items()}


class CreateBookRequest(_BookFields):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    genre: str | None = Field(default=None, max_length=50)
    isbn: str | None = Field(default=None, pattern=r"^(?:\d{10}|\d{13})$")
    publicationYear: int | None = Field(default=None, ge=1000, le=9999)
    publisher: str | None = Field(default=None, max_length=100)
    pageCount: int | None = Field(default=None, ge=1)
    coverImage: str | None = None


class UpdateBookRequest(_BookFields):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    genre: str | None = Field(default=None, max_length=50)
    isbn: str | None = Field(default=None, pattern=r"^(?:\d{10}|\d{13})$")
    publicationYear: int | None = Field(default=None, ge=1000, le=9999)
    publisher: str | None = Field(default=None, max_length=100)
    pageCount: int | None = Field(default=None, ge=1)
    coverImage: str | None = None
