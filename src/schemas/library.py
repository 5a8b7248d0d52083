"""Book, reading progress and achievement schema definitions."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ReadingStatus = Literal["reading", "completed", "wishlist"]


class CreateBookRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=200)
    genre: str = Field(min_length=1, max_length=80)
    description: Optional[str] = None
    cover_url: Optional[str] = None
    reading_level: Optional[str] = None
    pages: int = Field(default=0, ge=0)


class BookInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    book_id: str
    title: str
    author: str
    genre: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    reading_level: Optional[str] = None
    pages: int
    created_at: str


class UpdateReadingProgressRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[ReadingStatus] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100, description="Percent read")


class ReadingProgressInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    book_id: str
    status: str
    progress: int
    started_at: str
    completed_at: Optional[str] = None
    updated_at: str
    book: Optional[BookInfo] = None


class CreateAchievementRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(min_length=1)
    icon: str = Field(min_length=1)
    rarity: str = "common"


class AchievementInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    achievement_id: str
    name: str
    description: str
    icon: str
    rarity: str
    created_at: str


class AwardAchievementRequest(BaseModel):
    user_id: str = Field(min_length=1)
    achievement_id: str = Field(min_length=1)


class UserAchievementInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    achievement_id: str
    earned_at: str
    achievement: AchievementInfo
