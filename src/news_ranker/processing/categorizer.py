"""Keyword-based article categorization component."""

import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import CategorizationConfig
from ..logger import get_logger
from ..models import (
    CategorizationResult,
    CategoryRule,
    CategoryScore,
    RawArticle,
    ScoredArticle,
    SourceProfile,
)

SOURCE_HINT_BONUS = 5
STRONG_KEYWORD_POINTS = 2
TITLE_BONUS_POINTS = 1
WEAK_KEYWORD_POINTS = 1
EXCLUDE_KEYWORD_PENALTY = 5

ArticleLike = Union[RawArticle, ScoredArticle, Mapping[str, Any]]
SourceLookup = Callable[[Optional[str]], Optional[SourceProfile]]


def _fields(article: ArticleLike) -> Tuple[str, str, Optional[str], Optional[str]]:
    """Extract (title, description, source name, assigned category)."""
    if isinstance(article, Mapping):
        source = article.get('source')
        source_name = source.get('name') if isinstance(source, Mapping) else article.get('source_name')
        return (
            article.get('title') or '',
            article.get('description') or '',
            source_name,
            article.get('category')
        )
    return (
        article.title or '',
        article.description or '',
        article.source_name,
        getattr(article, 'category', None)
    )


class Categorizer:
    """Assigns one topical category per article from a configured rule set."""

    def __init__(
        self,
        categories: Sequence[CategoryRule],
        min_score: int = 3,
        confidence_ceiling: int = 20,
        fallback_category: str = "General"
    ):
        """
        Initialize categorizer.

        Args:
            categories: Category rules; their order breaks score ties
            min_score: Minimum winning score needed to assign a category
            confidence_ceiling: Score treated as 100% confidence
            fallback_category: Category used when nothing scores high enough
        """
        self.categories = tuple(categories)
        self.min_score = min_score
        self.confidence_ceiling = confidence_ceiling
        self.fallback_category = fallback_category
        self.logger = get_logger()

    @classmethod
    def from_config(cls, categories: Sequence[CategoryRule], config: CategorizationConfig) -> 'Categorizer':
        return cls(
            categories,
            min_score=config.min_score,
            confidence_ceiling=config.confidence_ceiling,
            fallback_category=config.fallback_category
        )

    def categorize(self, article: ArticleLike, source_profile: Optional[SourceProfile] = None) -> CategorizationResult:
        """
        Score every category against an article and pick the winner.

        Args:
            article: Article with a title and optional description
            source_profile: Resolved source profile, used as a category hint

        Returns:
            CategorizationResult; falls back to the fallback category with
            confidence 0 when the best score is below ``min_score``
        """
        title, description, _, _ = _fields(article)
        title_lower = title.lower()
        content = f"{title} {description}".lower()
        source_hint = source_profile.categories if source_profile else []

        scores = [
            CategoryScore(
                category=rule.name,
                score=self._score_category(rule, content, title_lower, source_hint)
            )
            for rule in self.categories
        ]
        # stable sort keeps declaration order for ties
        scores.sort(key=lambda s: s.score, reverse=True)

        if scores and scores[0].score >= self.min_score:
            winner = scores[0]
            confidence = min(100, math.floor(winner.score / self.confidence_ceiling * 100 + 0.5))
            return CategorizationResult(category=winner.category, confidence=confidence, scores=scores)

        return CategorizationResult(category=self.fallback_category, confidence=0, scores=scores)

    def _score_category(self, rule: CategoryRule, content: str, title_lower: str, source_hint: List[str]) -> int:
        score = 0

        if rule.name in source_hint:
            score += SOURCE_HINT_BONUS

        for keyword in rule.keywords.strong:
            keyword_lower = keyword.lower()
            if keyword_lower in content:
                score += STRONG_KEYWORD_POINTS
                if keyword_lower in title_lower:
                    score += TITLE_BONUS_POINTS

        for keyword in rule.keywords.weak:
            if keyword.lower() in content:
                score += WEAK_KEYWORD_POINTS

        for keyword in rule.keywords.exclude:
            if keyword.lower() in content:
                score -= EXCLUDE_KEYWORD_PENALTY

        return score

    def assign_category(self, article: ArticleLike, source_profile: Optional[SourceProfile] = None) -> str:
        """Return only the winning category name."""
        return self.categorize(article, source_profile).category

    def categorize_batch(
        self,
        articles: Sequence[ArticleLike],
        source_lookup: Optional[SourceLookup] = None
    ) -> List[str]:
        """
        Categorize each article independently.

        Args:
            articles: Articles to categorize
            source_lookup: Resolves a source name to a profile, e.g.
                ``SourceRegistry.find``

        Returns:
            Category names in input order
        """
        categories = []
        for article in articles:
            _, _, source_name, _ = _fields(article)
            profile = source_lookup(source_name) if source_lookup else None
            categories.append(self.assign_category(article, profile))
        return categories

    def filter_by_category(self, articles: Sequence[ArticleLike], category_name: str) -> List[ArticleLike]:
        """
        Keep articles belonging to a category.

        Articles that already carry a category are trusted; others are
        categorized on the fly.
        """
        matches = []
        for article in articles:
            _, _, _, assigned = _fields(article)
            category = assigned if assigned else self.assign_category(article)
            if category == category_name:
                matches.append(article)
        return matches

    def category_distribution(self, articles: Sequence[ArticleLike]) -> Dict[str, int]:
        """Count articles per category, including categories with none."""
        distribution = {rule.name: 0 for rule in self.categories}
        distribution[self.fallback_category] = 0

        for article in articles:
            category = self.assign_category(article)
            distribution[category] = distribution.get(category, 0) + 1

        return distribution

    def validate_category_match(
        self,
        article: ArticleLike,
        expected_category: str,
        min_confidence: int = 40
    ) -> bool:
        """Whether an article confidently belongs to the expected category."""
        result = self.categorize(article)
        return result.category == expected_category and result.confidence >= min_confidence

    def suggested_categories(self, article: ArticleLike, limit: int = 3) -> List[CategoryScore]:
        """Top positively scoring categories for an article."""
        result = self.categorize(article)
        return [s for s in result.scores if s.score > 0][:limit]

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRule]:
        for rule in self.categories:
            if rule.slug == slug:
                return rule
        return None

    def get_category_by_name(self, name: str) -> Optional[CategoryRule]:
        for rule in self.categories:
            if rule.name.lower() == name.lower():
                return rule
        return None

    def category_slugs(self) -> List[str]:
        return [rule.slug for rule in self.categories]
