"""Identity framework stores backed by the repositories."""

from .user_store import UserStore

__all__ = ["UserStore"]
