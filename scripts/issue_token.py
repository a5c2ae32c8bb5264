"""Utility script to mint a bearer token for local development."""

from __future__ import annotations

import argparse
from datetime import timedelta

from guardian_inbox.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for token creation."""

    parser = argparse.ArgumentParser(
        description="Create a development access token for the Guardian Inbox API.",
    )
    parser.add_argument("uid", help="User id placed in the token subject")
    parser.add_argument("--email", default=None, help="Email claim (optional)")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    return parser.parse_args()


def main() -> None:
    """Print a signed token for the requested user."""

    args = parse_args()
    claims: dict[str, str] = {"sub": args.uid}
    if args.email:
        claims["email"] = args.email
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(claims, expires_delta=expires))


if __name__ == "__main__":
    main()
