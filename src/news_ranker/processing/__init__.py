"""Processing package for article scoring, deduplication, and categorization."""

from .scorer import ArticleScorer, is_trending, round_half_up, should_feature
from .deduplicator import Deduplicator, deduplicate_articles, deduplication_stats
from .categorizer import Categorizer

__all__ = [
    'ArticleScorer',
    'Deduplicator',
    'Categorizer',
    'deduplicate_articles',
    'deduplication_stats',
    'is_trending',
    'round_half_up',
    'should_feature'
]
