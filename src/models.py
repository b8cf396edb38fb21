"""Pydantic schemas for the JSONPlaceholder resources."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ResourceType(str, Enum):
    """Resources exposed by the API, valued by their endpoint name."""

    USER = "users"
    POST = "posts"
    COMMENT = "comments"
    ALBUM = "albums"
    PHOTO = "photos"
    TODO = "todos"


class ApiModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Post(ApiModel):
    id: int = 0
    user_id: int = Field(..., alias="userId")
    title: str
    body: str


class Comment(ApiModel):
    id: int = 0
    post_id: int = Field(..., alias="postId")
    name: str
    email: str
    body: str


class Album(ApiModel):
    id: int = 0
    user_id: int = Field(..., alias="userId")
    title: str


class Photo(ApiModel):
    id: int = 0
    album_id: int = Field(..., alias="albumId")
    title: str
    url: str
    thumbnail_url: str = Field(..., alias="thumbnailUrl")


class Todo(ApiModel):
    id: int = 0
    user_id: int = Field(..., alias="userId")
    title: str
    completed: bool = False


class Geo(ApiModel):
    lat: str
    lng: str


class Address(ApiModel):
    street: str
    suite: str
    city: str
    zipcode: str
    geo: Geo


class Company(ApiModel):
    name: str
    catch_phrase: str = Field(..., alias="catchPhrase")
    bs: str


class User(ApiModel):
    id: int = 0
    name: str
    username: str
    email: str
    address: Address | None = None
    phone: str | None = None
    website: str | None = None
    company: Company | None = None
