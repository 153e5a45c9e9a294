from datetime import datetime

from pydantic import BaseModel, Field


class BlogPostItem(BaseModel):
    id: str
    title: str
    description: str | None = None
    content: str
    tags: list[str] = []
    read_time: str
    date: str
    time: str
    created_at: datetime
    updated_at: datetime


class CreateBlogPostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    description: str | None = None
    tags: list[str] | None = None
    date: str | None = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str | None = Field(None, pattern=r"^\d{2}:\d{2}$")


class UpdateBlogPostRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    description: str | None = None
    tags: list[str] | None = None
    date: str | None = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str | None = Field(None, pattern=r"^\d{2}:\d{2}$")


class MessageResponse(BaseModel):
    message: str
