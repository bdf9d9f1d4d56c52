"""Relevance scoring for blueprint documents."""

from .rules import DEFAULT_WEIGHTS, EXCLUDE, MatchContext, ProjectFlags, ScoringRule, build_rules
from .scorer import RelevanceScorer
from .terms import mentions, tokenize

__all__ = [
    "DEFAULT_WEIGHTS",
    "EXCLUDE",
    "MatchContext",
    "ProjectFlags",
    "RelevanceScorer",
    "ScoringRule",
    "build_rules",
    "mentions",
    "tokenize",
]
