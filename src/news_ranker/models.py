"""Data models for the news ranking pipeline."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ArticleSource:
    """Upstream source identifier attached to a raw article."""
    id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class RawArticle:
    """Article as delivered by the news-fetching collaborator."""
    title: str
    url: str
    published_at: str
    description: Optional[str] = None
    url_to_image: Optional[str] = None
    source: Optional[ArticleSource] = None
    content: Optional[str] = None
    author: Optional[str] = None

    @property
    def source_name(self) -> Optional[str]:
        return self.source.name if self.source else None

    def to_dict(self) -> dict:
        """Convert article to the NewsAPI-style dictionary."""
        data = {
            'title': self.title,
            'description': self.description,
            'url': self.url,
            'urlToImage': self.url_to_image,
            'publishedAt': self.published_at,
            'content': self.content,
            'author': self.author,
            'source': asdict(self.source) if self.source else None,
        }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawArticle':
        """Create RawArticle from a NewsAPI article dictionary."""
        source_data = data.get('source')
        source = None
        if isinstance(source_data, dict):
            source = ArticleSource(id=source_data.get('id'), name=source_data.get('name'))

        return cls(
            title=data.get('title') or '',
            url=data.get('url') or '',
            published_at=data.get('publishedAt') or data.get('published_at') or '',
            description=data.get('description'),
            url_to_image=data.get('urlToImage') or data.get('url_to_image'),
            source=source,
            content=data.get('content'),
            author=data.get('author'),
        )


@dataclass(frozen=True)
class SourceProfile:
    """Curated news source with an authority tier."""
    domain: str
    tier: int
    authority_score: int
    name: str
    categories: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Individual sub-scores that make up an article score."""
    source_authority: float  # 0-100
    recency: float           # 0-100
    image_quality: float     # 0-50
    title_quality: float     # 0-50
    description_quality: float  # 0-30


@dataclass(frozen=True)
class ArticleScore:
    """Weighted quality score for an article."""
    total: float  # 0-100, one decimal place
    breakdown: ScoreBreakdown

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ScoredArticle:
    """Raw article together with its score and resolved source profile."""
    article: RawArticle
    score: ArticleScore
    source_profile: Optional[SourceProfile] = None

    @property
    def title(self) -> str:
        return self.article.title

    @property
    def description(self) -> Optional[str]:
        return self.article.description

    @property
    def source_name(self) -> Optional[str]:
        return self.article.source_name


@dataclass(frozen=True)
class CategoryKeywords:
    """Keyword tiers used when scoring a category."""
    strong: List[str] = field(default_factory=list)   # +2 each, +1 more in title
    weak: List[str] = field(default_factory=list)     # +1 each
    exclude: List[str] = field(default_factory=list)  # -5 each


@dataclass(frozen=True)
class CategoryRule:
    """Configured news category and its categorization rules."""
    slug: str
    name: str
    keywords: CategoryKeywords
    description: str = ""
    preferred_sources: List[str] = field(default_factory=list)
    queries: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryScore:
    """Score of a single category for one article."""
    category: str
    score: int


@dataclass(frozen=True)
class CategorizationResult:
    """Outcome of categorizing a single article."""
    category: str
    confidence: int  # 0-100
    scores: List[CategoryScore] = field(default_factory=list)


@dataclass(frozen=True)
class DeduplicationStats:
    """Summary of how many articles deduplication removed."""
    original_count: int
    deduplicated_count: int
    removed_count: int
    removal_rate: float  # percentage, one decimal place


@dataclass(frozen=True)
class OutputArticle:
    """Final article record handed to the caller for display."""
    id: int
    title: str
    description: str
    url: str
    url_to_image: str
    published_at: str
    category: str
    score: int
    source_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to the camelCase dictionary used for serialization."""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'url': self.url,
            'urlToImage': self.url_to_image,
            'publishedAt': self.published_at,
            'category': self.category,
            'score': self.score,
            'sourceName': self.source_name,
        }
