"""Infrastructure layer implementations."""

from src.infrastructure import notifications, storage

__all__ = ["storage", "notifications"]
