"""
Console summary of users, posts and todos.

Fetches the three resources concurrently and renders per-user activity
with rich.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console
from rich.table import Table

from src.logging_config import get_logger
from src.models import Post, Todo, User
from src.repositories import PostRepository, TodoRepository, UserRepository
from src.result import Result, combine

logger = get_logger("report")


@dataclass
class UserSummary:
    """Activity of a single user."""

    user_id: int
    name: str
    username: str
    post_count: int = 0
    todo_total: int = 0
    todo_completed: int = 0

    @property
    def completion_rate(self) -> float:
        return self.todo_completed / self.todo_total if self.todo_total else 0.0


@dataclass
class SummaryReport:
    users: list[UserSummary] = field(default_factory=list)
    total_posts: int = 0
    total_todos: int = 0

    @property
    def total_completed(self) -> int:
        return sum(user.todo_completed for user in self.users)


def summarize(users: list[User], posts: list[Post], todos: list[Todo]) -> SummaryReport:
    """Aggregate post and todo counts per user."""
    posts_by_user = Counter(post.user_id for post in posts)
    todos_by_user = Counter(todo.user_id for todo in todos)
    done_by_user = Counter(todo.user_id for todo in todos if todo.completed)

    summaries = [
        UserSummary(
            user_id=user.id,
            name=user.name,
            username=user.username,
            post_count=posts_by_user[user.id],
            todo_total=todos_by_user[user.id],
            todo_completed=done_by_user[user.id],
        )
        for user in sorted(users, key=lambda u: u.id)
    ]
    return SummaryReport(users=summaries, total_posts=len(posts), total_todos=len(todos))


async def build_summary(
    users: UserRepository,
    posts: PostRepository,
    todos: TodoRepository,
    *,
    cancel: asyncio.Event | None = None,
) -> Result[SummaryReport]:
    """Fetch users, posts and todos concurrently and summarize them."""
    results: list[Result[Any]] = list(
        await asyncio.gather(
            users.get_all(cancel=cancel),
            posts.get_all(cancel=cancel),
            todos.get_all(cancel=cancel),
        )
    )
    summary = combine(results).map(lambda values: summarize(*values))
    if summary.is_failure:
        logger.error(f"Could not build summary: {summary.error}")
    return summary


def render_summary(report: SummaryReport, console: Console) -> None:
    table = Table(title="User activity")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Username")
    table.add_column("Posts", justify="right")
    table.add_column("Todos done", justify="right")
    table.add_column("Completion", justify="right")

    for user in report.users:
        table.add_row(
            str(user.user_id),
            user.name,
            user.username,
            str(user.post_count),
            f"{user.todo_completed}/{user.todo_total}",
            f"{user.completion_rate:.0%}",
        )

    console.print(table)
    console.print(
        f"[bold]{len(report.users)}[/] users, [bold]{report.total_posts}[/] posts, "
        f"[bold]{report.total_completed}/{report.total_todos}[/] todos completed"
    )


def render_failure(result: Result[Any], console: Console) -> None:
    """Show a failed result as its message and classification."""
    console.print(f"[red]✗ {result.error}[/] [dim]({result.error_type.value})[/]")
