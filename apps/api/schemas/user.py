from pydantic import BaseModel, ConfigDict, Field

_CAMEL_TO_COLUMN = {
    "displayName": "name",
    "favoriteGenres": "favorite_genres",
}


class UserOut(BaseModel):
    id: str
    username: str
    displayName: str
    role: str = "user"
    bio: str | None = None
    avatar: str | None = None
    favoriteGenres: list[str] = Field(default_factory=list)
    reviewsCount: int = 0


class UpdateProfileRequest(BaseModel):
    # Email, role and reviewsCount are not editable here.
    model_config = ConfigDict(extra="forbid")

    displayName: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    avatar: str | None = Field(default=None, max_length=1000)
    favoriteGenres: list[str] | None = Field(default=None, max_length=10)

    def to_columns(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        return {_CAMEL_TO_COLUMN.get(key, key): value for key, value in data.items()}


class GenreStatOut(BaseModel):
    genre: str
    count: int
    averageRating: float


class StatusCountOut(BaseModel):
    status: str
    count: int


class UserStatsOut(BaseModel):
    totalReviews: int
    averageRating: float
    totalLikes: int
    totalHelpful: int
    favoriteGenres: list[GenreStatOut]
    readingStatusDistribution: list[StatusCountOut]
