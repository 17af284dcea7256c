"""NewsAPI fetcher that supplies raw article batches to the pipeline."""

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import NewsAPIConfig
from ..logger import get_logger
from ..models import CategoryRule, RawArticle
from ..queries import build_rotating_query, days_ago
from ..quota import QuotaTracker
from ..sources import SourceRegistry

REMOVED_MARKER = "[Removed]"

STRATEGIES = ('homepage', 'category', 'search')


class FetchError(Exception):
    """Raised when the upstream news API cannot be queried."""
    pass


@dataclass
class FetchRequest:
    """Query parameters for one call to the everything endpoint."""
    query: str
    sort_by: str  # "relevancy", "popularity" or "publishedAt"
    page_size: int
    page: int = 1
    domains: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    language: str = "en"

    def to_params(self, api_key: str) -> Dict[str, str]:
        params = {
            'q': self.query,
            'apiKey': api_key,
            'pageSize': str(self.page_size),
            'page': str(self.page),
            'sortBy': self.sort_by,
            'language': self.language,
        }
        if self.domains:
            params['domains'] = self.domains
        if self.from_date:
            params['from'] = self.from_date
        if self.to_date:
            params['to'] = self.to_date
        return params


class NewsAPIFetcher:
    """Fetches articles from NewsAPI using homepage, category or search strategies."""

    def __init__(
        self,
        config: NewsAPIConfig,
        registry: SourceRegistry,
        quota: QuotaTracker,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize NewsAPI fetcher.

        Args:
            config: API key, endpoint and paging settings
            registry: Source whitelist used for the domains filter
            quota: Request counter shared by every fetcher in the process
            rng: Random source for homepage query rotation
        """
        self.config = config
        self.registry = registry
        self.quota = quota
        self.rng = rng or random.Random()
        self.logger = get_logger()

    def build_request(
        self,
        strategy: str = 'homepage',
        category: Optional[CategoryRule] = None,
        search_query: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> FetchRequest:
        """
        Build the request for a fetch strategy.

        Homepage fetches rotate through trending queries across every
        whitelisted domain, category fetches use the category's own
        queries and preferred sources, and searches run the user's query.

        Raises:
            ValueError: If the strategy is unknown, or a category/search
                fetch lacks its category/query
        """
        page_size = page_size or self.config.page_size

        if strategy == 'homepage':
            return FetchRequest(
                query=build_rotating_query(self.rng),
                sort_by='popularity',
                page_size=page_size,
                page=page,
                domains=self.registry.all_domains(),
                from_date=from_date or days_ago(3),
                to_date=to_date,
                language=self.config.language
            )

        if strategy == 'category':
            if category is None:
                raise ValueError("Category is required for category strategy")
            return FetchRequest(
                query=" OR ".join(category.queries),
                sort_by='publishedAt',
                page_size=page_size,
                page=page,
                domains=",".join(category.preferred_sources),
                from_date=from_date or days_ago(7),
                to_date=to_date,
                language=self.config.language
            )

        if strategy == 'search':
            if not search_query:
                raise ValueError("Search query is required for search strategy")
            return FetchRequest(
                query=search_query,
                sort_by='relevancy',
                page_size=page_size,
                page=page,
                domains=self.registry.all_domains(),
                from_date=from_date or days_ago(30),
                to_date=to_date,
                language=self.config.language
            )

        raise ValueError(f"Unknown strategy: {strategy}")

    async def fetch(self, request: FetchRequest, strategy: str = 'homepage') -> List[RawArticle]:
        """
        Execute a request and return the cleaned article batch.

        Returns an empty list without calling the API once today's quota
        is used up.

        Raises:
            FetchError: If no API key is configured or the request fails
        """
        if not self.config.api_key:
            raise FetchError("NEWS_API_KEY is not configured")

        if self.quota.try_acquire('everything', query=request.query, strategy=strategy) is None:
            self.logger.error(f"API daily limit reached ({self.quota.daily_limit} requests)")
            return []

        self.logger.info(f"Fetching articles with query: {request.query[:100]}")
        self.logger.debug(f"Sort by: {request.sort_by} | Domains: {'filtered' if request.domains else 'all'}")

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.get(
                    self.config.base_url,
                    params=request.to_params(self.config.api_key)
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            self.logger.error(f"Failed to fetch articles: HTTP {e.response.status_code}")
            raise FetchError(f"Failed to fetch articles: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            self.logger.error(f"Failed to fetch articles: {e}")
            raise FetchError(f"Failed to fetch articles: {e}") from e

        records = data.get('articles') or []
        self.logger.info(f"Fetched {len(records)} articles from NewsAPI")

        return self.clean_records(records)

    def clean_records(self, records: List[Dict[str, Any]]) -> List[RawArticle]:
        """
        Drop removed or incomplete records and convert the rest.

        A record is kept only if it has both a title and a description
        and neither carries the "[Removed]" marker.
        """
        articles = []
        for record in records:
            title = record.get('title')
            description = record.get('description')
            if not title or not description:
                continue
            if REMOVED_MARKER in title or REMOVED_MARKER in description:
                continue
            articles.append(RawArticle.from_dict(record))

        dropped = len(records) - len(articles)
        if dropped:
            self.logger.debug(f"Dropped {dropped} removed or incomplete records")
        return articles
