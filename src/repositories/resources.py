"""Repositories for the individual JSONPlaceholder resources."""

import asyncio

from src.models import Album, Comment, Photo, Post, ResourceType, Todo, User
from src.result import ErrorType, Result

from .base import Repository


class PostRepository(Repository[Post]):
    model = Post
    resource = ResourceType.POST

    async def get_by_user(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Post]]:
        return await self._fetch_list(f"posts?userId={user_id}", Post, cancel)

    async def search_by_title(
        self, term: str, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Post]]:
        """Case-insensitive substring search over post titles."""
        needle = term.lower()
        return (await self.get_all(cancel=cancel)).map(
            lambda posts: [post for post in posts if needle in post.title.lower()]
        )

    async def get_comments(
        self, post_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Comment]]:
        return await self._fetch_list(f"posts/{post_id}/comments", Comment, cancel)


class UserRepository(Repository[User]):
    model = User
    resource = ResourceType.USER

    async def get_by_username(
        self, username: str, *, cancel: asyncio.Event | None = None
    ) -> Result[User]:
        def find(users: list[User]) -> Result[User]:
            for user in users:
                if user.username.lower() == username.lower():
                    return Result.success(user)
            return Result.failure(f"User not found: {username}", ErrorType.NOT_FOUND)

        return (await self.get_all(cancel=cancel)).bind(find)

    async def get_posts(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Post]]:
        return await self._fetch_list(f"users/{user_id}/posts", Post, cancel)

    async def get_todos(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Todo]]:
        return await self._fetch_list(f"users/{user_id}/todos", Todo, cancel)

    async def get_albums(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Album]]:
        return await self._fetch_list(f"users/{user_id}/albums", Album, cancel)


class TodoRepository(Repository[Todo]):
    model = Todo
    resource = ResourceType.TODO

    async def get_by_user(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Todo]]:
        return await self._fetch_list(f"todos?userId={user_id}", Todo, cancel)

    async def get_completed(self, *, cancel: asyncio.Event | None = None) -> Result[list[Todo]]:
        return (await self.get_all(cancel=cancel)).map(
            lambda todos: [todo for todo in todos if todo.completed]
        )

    async def get_pending(self, *, cancel: asyncio.Event | None = None) -> Result[list[Todo]]:
        return (await self.get_all(cancel=cancel)).map(
            lambda todos: [todo for todo in todos if not todo.completed]
        )


class AlbumRepository(Repository[Album]):
    model = Album
    resource = ResourceType.ALBUM

    async def get_by_user(
        self, user_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Album]]:
        return await self._fetch_list(f"albums?userId={user_id}", Album, cancel)

    async def get_photos(
        self, album_id: int, *, cancel: asyncio.Event | None = None
    ) -> Result[list[Photo]]:
        return await self._fetch_list(f"albums/{album_id}/photos", Photo, cancel)
