"""Article quality scoring component."""

import math
import re
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from ..config import ScoringWeights
from ..logger import get_logger
from ..models import ArticleScore, RawArticle, ScoreBreakdown, ScoredArticle, SourceProfile
from ..sources import SourceRegistry

UNKNOWN_SOURCE_AUTHORITY = 40

# (hours, score) steps; anything older scores RECENCY_FLOOR
RECENCY_STEPS = (
    (6, 100),
    (24, 90),
    (72, 70),
    (168, 50),
    (336, 30),
)
RECENCY_FLOOR = 10

IMAGE_HOST_HINTS = ('cloudinary.com', 'amazonaws.com', 'cdn', 'img', 'images')

INTERESTING_KEYWORDS = (
    'announces', 'launches', 'unveils', 'reveals', 'breakthrough', 'discovery',
    'first', 'new', 'major', 'historic', 'unprecedented', 'breaking',
)

CLICKBAIT_PATTERNS = (
    "won't believe", "will shock you", "shocking", "you need to", "this is why",
    "the reason why", "what happens next", "number", "amazing", "incredible",
    "mind-blowing", "jaw-dropping",
)

FEATURE_THRESHOLD = 80
TRENDING_THRESHOLD = 75
TRENDING_MIN_RECENCY = 70

# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"\.(\d+)")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, as display scores have always been rounded."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 publish timestamp.

    Returns:
        Timezone-aware datetime (naive values are taken as UTC), or None
        if the value is missing or unparseable
    """
    if not value:
        return None
    try:
        text = value.strip().replace('Z', '+00:00')
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ArticleScorer:
    """Computes a 0-100 quality score from five weighted factors."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize article scorer.

        Args:
            weights: Factor weights (defaults to 30/25/15/20/10)
            clock: Returns the current time; injectable for tests
        """
        self.weights = weights or ScoringWeights()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def score(self, article: RawArticle, source_profile: Optional[SourceProfile] = None) -> ArticleScore:
        """
        Score an article.

        Never raises: every input field is optional or defaulted.

        Args:
            article: Raw article to score
            source_profile: Resolved source profile, if any

        Returns:
            ArticleScore with total rounded to one decimal place
        """
        breakdown = ScoreBreakdown(
            source_authority=self._score_source_authority(source_profile),
            recency=self._score_recency(article.published_at),
            image_quality=self._score_image_quality(article.url_to_image),
            title_quality=self._score_title_quality(article.title),
            description_quality=self._score_description_quality(article.description)
        )

        total = (
            breakdown.source_authority * self.weights.source_authority +
            breakdown.recency * self.weights.recency +
            breakdown.image_quality * self.weights.image_quality +
            breakdown.title_quality * self.weights.title_quality +
            breakdown.description_quality * self.weights.description_quality
        )

        return ArticleScore(total=round_half_up(total, 1), breakdown=breakdown)

    def _score_source_authority(self, source_profile: Optional[SourceProfile]) -> int:
        if source_profile is None:
            return UNKNOWN_SOURCE_AUTHORITY
        return source_profile.authority_score

    def _score_recency(self, published_at: Optional[str]) -> int:
        """Step-function score of hours since publication (0-100)."""
        published = parse_timestamp(published_at)
        if published is None:
            return RECENCY_FLOOR

        hours_ago = (self.clock() - published).total_seconds() / 3600
        for max_hours, score in RECENCY_STEPS:
            if hours_ago < max_hours:
                return score
        return RECENCY_FLOOR

    def _score_image_quality(self, url_to_image: Optional[str]) -> int:
        """
        Score image presence and hosting (0-50).

        HTTPS images score 40, HTTP 30, anything else 0. Images served
        from a known CDN earn a 10 point bonus.
        """
        if not url_to_image:
            return 0

        if url_to_image.startswith('https://'):
            score = 40
        elif url_to_image.startswith('http://'):
            score = 30
        else:
            return 0

        if any(hint in url_to_image for hint in IMAGE_HOST_HINTS):
            score += 10

        return min(score, 50)

    def _score_title_quality(self, title: Optional[str]) -> int:
        """
        Score title length and wording (0-50).

        Base 20, plus a length bonus, +10 for newsworthy keywords,
        -20 for clickbait and -10 for shouting in all caps.
        """
        if not title:
            return 0

        score = 20
        length = len(title)

        if 50 <= length <= 100:
            score += 20
        elif 30 <= length < 50:
            score += 15
        elif 100 < length <= 150:
            score += 10
        elif length < 30:
            score += 5

        title_lower = title.lower()

        if any(keyword in title_lower for keyword in INTERESTING_KEYWORDS):
            score += 10

        if any(pattern in title_lower for pattern in CLICKBAIT_PATTERNS):
            score -= 20

        if title == title.upper() and length > 10:
            score -= 10

        return max(0, min(score, 50))

    def _score_description_quality(self, description: Optional[str]) -> int:
        """Score description length (0-30)."""
        if not description:
            return 0

        length = len(description)

        if 100 <= length <= 300:
            return 30
        if 50 <= length < 100:
            return 20
        if 20 <= length < 50:
            return 10
        if length > 300:
            return 20
        return 0

    def score_articles(self, articles: Iterable[RawArticle], registry: SourceRegistry) -> List[ScoredArticle]:
        """
        Resolve each article's source profile and score it.

        Args:
            articles: Raw articles to score
            registry: Source whitelist used to resolve profiles

        Returns:
            ScoredArticle list in input order
        """
        scored = []
        for article in articles:
            profile = registry.find(article.source_name)
            scored.append(ScoredArticle(
                article=article,
                score=self.score(article, profile),
                source_profile=profile
            ))

        get_logger().debug(f"Scored {len(scored)} articles")
        return scored


def should_feature(score: ArticleScore) -> bool:
    """Whether an article is good enough to be highlighted."""
    return score.total >= FEATURE_THRESHOLD


def is_trending(score: ArticleScore) -> bool:
    """High overall score and published recently."""
    return score.total >= TRENDING_THRESHOLD and score.breakdown.recency >= TRENDING_MIN_RECENCY


def score_tier(total: float) -> str:
    """Display tier for a total score: premium, good, standard or low."""
    if total >= 80:
        return 'premium'
    if total >= 65:
        return 'good'
    if total >= 50:
        return 'standard'
    return 'low'
