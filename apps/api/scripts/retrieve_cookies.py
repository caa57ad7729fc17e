"""Log in to Instagram and print the session cookies an account needs.

Run with:

    python scripts/retrieve_cookies.py [username] [password] [--output FILE]

Missing credentials are prompted for; the password prompt does not echo.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import os
import sys
from typing import Optional, Sequence

# Add parent dir to path to find the api modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.instagram import CookieRetrievalResult, InstagramClient, build_http_client, retrieve_session_cookies


def _shorten(value: str, width: int = 30) -> str:
    return value if len(value) <= width else value[: width - 3] + "..."


async def fetch_cookies(username: str, password: str) -> CookieRetrievalResult:
    async with build_http_client() as http:
        return await retrieve_session_cookies(InstagramClient(http), username, password)


def print_result(result: CookieRetrievalResult) -> None:
    print("🍪 Retrieved cookies:")
    for name, value in result.cookies.items():
        print(f"  {name}: {_shorten(value)}")
    print()
    print("Cookie string:")
    print(result.cookie_string)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Retrieve Instagram session cookies for an account")
    parser.add_argument("username", nargs="?", help="Instagram username or email")
    parser.add_argument("password", nargs="?", help="Instagram password (prompted when omitted)")
    parser.add_argument("--output", "-o", help="Write the cookie string to this file")
    args = parser.parse_args(argv)

    username = args.username or input("Enter Instagram username: ").strip()
    password = args.password or getpass.getpass("Enter Instagram password: ")
    if not username or not password:
        print("❌ Username and password are required", file=sys.stderr)
        return 1

    result = asyncio.run(fetch_cookies(username, password))
    if not result.success:
        print(f"❌ {result.message}", file=sys.stderr)
        return 1

    print_result(result)

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as handle:
                handle.write(result.cookie_string)
        except OSError as exc:
            print(f"❌ Failed to save file: {exc}", file=sys.stderr)
            return 1
        print(f"✅ Cookies saved to {args.output}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
