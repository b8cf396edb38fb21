"""Fetch data from the API and print a user activity report."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from rich.console import Console

from src.api import create_client
from src.config import ClientSettings, get_app_settings, get_settings
from src.logging_config import setup_logging
from src.report import build_summary, render_failure, render_summary
from src.repositories import PostRepository, TodoRepository, UserRepository


async def run(settings: ClientSettings, console: Console) -> int:
    async with create_client(settings) as client:
        report = await build_summary(
            UserRepository(client),
            PostRepository(client),
            TodoRepository(client),
        )

    if report.is_failure:
        render_failure(report, console)
        return 1

    render_summary(report.value, console)
    return 0


def main() -> int:
    app_settings = get_app_settings()
    setup_logging(app_settings.log_level, log_http=app_settings.log_http)
    console = Console()

    try:
        settings = get_settings()
    except ValidationError:
        console.print("[dim]API_BASE_URL not set, using the JSONPlaceholder sandbox[/]")
        settings = ClientSettings.sandbox()

    console.print(f"Fetching from [cyan]{settings.base_url}[/]\n")
    return asyncio.run(run(settings, console))


if __name__ == "__main__":
    sys.exit(main())
