"""Payload types of the Scoop.it API.

Field names follow Python conventions; the camelCase names used on the wire
are declared as aliases, so models validate API payloads and dump back to
them with ``by_alias=True``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TopicOrder(str, Enum):
    """Sort order of the curated posts of a topic."""

    TAG = "tag"
    SEARCH = "search"
    CURATION_DATE = "curationDate"
    USER = "user"


class SearchType(str, Enum):
    USER = "user"
    TOPIC = "topic"
    POST = "post"


class CompilationSort(str, Enum):
    """RSS order, or the order of the "My followed scoops" timeline."""

    RSS = "rss"
    TIMELINE = "timeline"


class User(ApiModel):
    id: int
    name: str
    short_name: str
    url: str
    bio: Optional[str] = None
    small_avatar_url: str
    medium_avatar_url: str
    avatar_url: str
    large_avatar_url: str
    curated_topics: Optional[list[Topic]] = None
    followed_topics: Optional[list[Topic]] = None


class TopicTag(ApiModel):
    tag: str
    post_count: int


class Stats(ApiModel):
    uv: int
    uvp: int
    v: int
    vp: int


class Topic(ApiModel):
    id: int
    small_image_url: str
    medium_image_url: str
    image_url: str
    large_image_url: str
    description: Optional[str] = None
    name: str
    short_name: str
    url: str
    lang: str
    curated_post_count: int
    creator: Optional[User] = None
    pinned_post: Optional[Post] = None
    curated_posts: Optional[list[Post]] = None
    tags: Optional[list[TopicTag]] = None
    stats: Optional[Stats] = None


class Post(ApiModel):
    """A curated post, a.k.a. a scoop."""

    id: int
    content: str
    html_content: str
    html_fragment: Optional[str] = None
    insight: Optional[str] = None
    html_insight: Optional[str] = None
    title: str
    thanks_count: int
    reactions_count: int
    url: Optional[str] = None
    scoop_url: str
    scoop_short_url: str
    small_image_url: Optional[str] = None
    medium_image_url: Optional[str] = None
    image_url: Optional[str] = None
    large_image_url: Optional[str] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    image_size: Optional[str] = None
    image_position: Optional[str] = None
    tags: Optional[list[str]] = None
    comments_count: int
    page_views: Optional[int] = None
    page_clicks: Optional[int] = None
    author: Optional[User] = None
    is_user_suggestion: bool
    suggested_by: Optional[User] = None
    twitter_author: Optional[str] = None
    publication_date: Optional[int] = None
    curation_date: int
    topic_id: int
    topic: Optional[Topic] = None


class SearchResults(ApiModel):
    users: Optional[list[User]] = None
    topics: Optional[list[Topic]] = None
    posts: Optional[list[Post]] = None
    total_found: int


# Response envelopes. Errors reported inside a 2xx envelope ({"error": ...})
# are classified before these models are validated.

class ProfileResponse(ApiModel):
    user: User


class TopicResponse(ApiModel):
    topic: Topic


class CompilationResponse(ApiModel):
    posts: list[Post]


class ConnectionTestResponse(ApiModel):
    connected_user: Optional[str] = None


User.model_rebuild()
Topic.model_rebuild()
