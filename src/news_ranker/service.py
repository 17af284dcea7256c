"""High-level entry points combining the fetcher with the pipeline."""

from typing import List

from .fetchers.newsapi import NewsAPIFetcher
from .logger import get_logger
from .models import OutputArticle
from .orchestrator import ArticlePipeline, PipelineError


class NewsService:
    """Fetches a batch for a strategy and runs it through the pipeline."""

    def __init__(self, fetcher: NewsAPIFetcher, pipeline: ArticlePipeline):
        self.fetcher = fetcher
        self.pipeline = pipeline
        self.logger = get_logger()

    async def homepage(self, page: int = 1) -> List[OutputArticle]:
        """Trending articles across all whitelisted sources."""
        request = self.fetcher.build_request('homepage', page=page)
        raw_articles = await self.fetcher.fetch(request, strategy='homepage')
        return self.pipeline.process(raw_articles)

    async def by_category(self, category_slug: str, page: int = 1) -> List[OutputArticle]:
        """
        Recent articles for one category, all labelled with that category.

        Raises:
            PipelineError: If the slug is not a configured category
        """
        category = self.pipeline.categorizer.get_category_by_slug(category_slug)
        if category is None:
            raise PipelineError(f"Category not found: {category_slug}")

        request = self.fetcher.build_request('category', category=category, page=page)
        raw_articles = await self.fetcher.fetch(request, strategy='category')
        return self.pipeline.process(raw_articles, preset_category=category)

    async def search(self, query: str, page: int = 1) -> List[OutputArticle]:
        """Articles matching a free-text query; blank queries return nothing."""
        if not query or not query.strip():
            return []

        request = self.fetcher.build_request('search', search_query=query, page=page)
        raw_articles = await self.fetcher.fetch(request, strategy='search')
        return self.pipeline.process(raw_articles)
