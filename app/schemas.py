from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Post (requests) ---

class PostCreate(BaseModel):
    # Title and content are validated by the service so that a missing
    # field yields 400 rather than FastAPI's 422.
    title: str | None = Field(None, max_length=300)
    content: str | None = None
    image: str | None = Field(None, max_length=1000)
    category: str | None = Field(None, max_length=100)


class PostUpdate(BaseModel):
    title: str | None = Field(None, max_length=300)
    content: str | None = None
    category: str | None = Field(None, max_length=100)
    image: str | None = Field(None, max_length=1000)


# --- Post (responses) ---

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostViewResponse(_CamelModel):
    user_id: str | None
    viewed_at: datetime


class PostResponse(_CamelModel):
    id: int
    user_id: str
    title: str
    content: str
    image: str
    video: str
    category: str
    slug: str
    views: int
    view_history: list[PostViewResponse] = []
    created_at: datetime
    updated_at: datetime


class PostListResponse(_CamelModel):
    posts: list[PostResponse]
    total_posts: int
    last_month_posts: int
