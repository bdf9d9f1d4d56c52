"""Project stack analysis feeding the signature extractor."""

from .scanner import RepoInventory, RepoScanner
from .stack import StackDetector

__all__ = ["RepoInventory", "RepoScanner", "StackDetector"]
