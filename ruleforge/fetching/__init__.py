"""Listing and fetching blueprint documents."""

from .client import (
    ContentTree,
    FetchError,
    GitHubContentTree,
    LocalContentTree,
    TreeEntry,
    discover_candidates,
)
from .pool import FetchFailure, FetchOutcome, fetch_bodies

__all__ = [
    "ContentTree",
    "FetchError",
    "FetchFailure",
    "FetchOutcome",
    "GitHubContentTree",
    "LocalContentTree",
    "TreeEntry",
    "discover_candidates",
    "fetch_bodies",
]
