"""Quick healthcheck against the configured API."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from src.api import create_client
from src.config import ClientSettings, get_settings
from src.models import Post


async def check(settings: ClientSettings) -> list[str]:
    """Return a list of problems found; empty when healthy."""
    issues = []

    async with create_client(settings) as client:
        single = await client.get("posts/1", Post)
        if single.is_failure:
            issues.append(f"GET posts/1: {single.error} ({single.error_type.value})")

        listing = await client.get_list("posts?userId=1", Post)
        if listing.is_failure:
            issues.append(f"GET posts?userId=1: {listing.error}")
        elif not listing.value:
            issues.append("No posts returned for user 1")

    return issues


def main() -> int:
    """Run healthcheck and return exit code."""
    try:
        settings = get_settings()
    except ValidationError:
        settings = ClientSettings.sandbox()

    issues = asyncio.run(check(settings))

    # Output
    if issues:
        print("UNHEALTHY")
        for issue in issues:
            print(f"  - {issue}")
        return 1
    else:
        print("HEALTHY")
        return 0


if __name__ == "__main__":
    sys.exit(main())
