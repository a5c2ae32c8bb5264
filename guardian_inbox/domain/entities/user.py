"""Domain entity for the authenticated user."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Identity resolved from the auth provider's bearer token."""

    id: str
    email: str | None = None
    name: str | None = None


__all__ = ["User"]
