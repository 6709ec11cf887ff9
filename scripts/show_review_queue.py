"""CLI script to print the classified review queue for a session."""
from __future__ import annotations

import argparse
import asyncio
import os

from oliver.services.api_client import ApiClient
from oliver.services.review_api import ReviewApi
from oliver.services.review_view import ReviewQueueView


async def run(args: argparse.Namespace) -> None:
    cookies = {}
    if args.access_token:
        cookies["ACCESS_TOKEN"] = args.access_token
    if args.refresh_token:
        cookies["REFRESH_TOKEN"] = args.refresh_token

    async with ApiClient(args.base_url, cookies=cookies) as client:
        view = ReviewQueueView(ReviewApi(client), page_size=args.page_size)
        view.set_filter(args.filter)
        view.set_page(args.page)
        page = await view.load()

    if page is None:
        return
    print(
        f"Page {page.current_page}/{page.total_pages} ({page.total_count} cards) "
        f"overdue={page.counts.overdue} due={page.counts.due} upcoming={page.counts.upcoming}"
    )
    for problem in page.items:
        print(
            f"{problem.priority_score:>5}  {problem.review_status:<8}  "
            f"{problem.problem_id}. {problem.problem_title}  ({problem.due_display})"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the review queue as the review page shows it")
    parser.add_argument("--base-url", help="Backend API base URL (default: BACKEND_API_URL)")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=10)
    parser.add_argument(
        "--filter",
        choices=["all", "1day", "3days", "7days"],
        default="all",
        help="Only show cards due within the given window",
    )
    parser.add_argument("--access-token", default=os.environ.get("OLIVER_ACCESS_TOKEN"))
    parser.add_argument("--refresh-token", default=os.environ.get("OLIVER_REFRESH_TOKEN"))

    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
