"""Provider executors for federated catalog search."""

from catalog.executors.base import run_provider_with_status, skipped_status

__all__ = [
    "run_provider_with_status",
    "skipped_status",
]
