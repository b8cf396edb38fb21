"""
Resource repositories.

Typed, cached access to the API resources on top of an ApiClient.
"""

from .base import Repository
from .resources import AlbumRepository, PostRepository, TodoRepository, UserRepository

__all__ = [
    "AlbumRepository",
    "PostRepository",
    "Repository",
    "TodoRepository",
    "UserRepository",
]
