"""Pipeline orchestrator that turns a raw article batch into ranked output."""

from typing import List, Optional, Sequence

from .config import Config
from .logger import get_logger
from .models import CategoryRule, OutputArticle, RawArticle, ScoredArticle
from .placeholders import placeholder_for_seed
from .processing.categorizer import Categorizer
from .processing.deduplicator import Deduplicator
from .processing.scorer import ArticleScorer, round_half_up
from .sources import SourceRegistry

NO_DESCRIPTION = "No description available"


class PipelineError(Exception):
    """Raised when the pipeline is called with an unusable configuration."""
    pass


class ArticlePipeline:
    """Scores, deduplicates, sorts and categorizes a batch of articles."""

    def __init__(
        self,
        config: Config,
        scorer: Optional[ArticleScorer] = None,
        deduplicator: Optional[Deduplicator] = None,
        categorizer: Optional[Categorizer] = None,
        registry: Optional[SourceRegistry] = None
    ):
        """
        Initialize pipeline orchestrator.

        Components not passed in are built from ``config``. None of them
        hold per-run state, so one pipeline can serve concurrent callers.

        Args:
            config: Application configuration
            scorer: Article scorer override
            deduplicator: Deduplicator override
            categorizer: Categorizer override
            registry: Source registry override
        """
        self.config = config
        self.logger = get_logger()

        self.registry = registry or SourceRegistry(config.sources)
        self.scorer = scorer or ArticleScorer(weights=config.scoring)
        self.deduplicator = deduplicator or Deduplicator.from_config(config.deduplication)
        self.categorizer = categorizer or Categorizer.from_config(config.categories, config.categorization)

    def process(
        self,
        raw_articles: Sequence[RawArticle],
        preset_category: Optional[CategoryRule] = None
    ) -> List[OutputArticle]:
        """
        Run score -> deduplicate -> sort -> categorize -> transform.

        Input is assumed to be already cleaned by the fetcher: every
        article has a title and no "[Removed]" placeholders remain.

        Args:
            raw_articles: Articles to process
            preset_category: When given, every article is assigned this
                category instead of running the categorizer

        Returns:
            Output articles sorted by score descending with ids 1..N
        """
        self.logger.info(f"Processing {len(raw_articles)} articles")

        # Resolve source profiles and score
        scored = self.scorer.score_articles(raw_articles, self.registry)
        self.logger.info(f"Stage 1: Scored {len(scored)} articles")

        # Collapse duplicate coverage
        deduplicated = self.deduplicator.deduplicate(scored)
        self.logger.info(f"Stage 2: Deduplicated {len(scored)} -> {len(deduplicated)} articles")

        # Stable sort by score
        ranked = sorted(deduplicated, key=lambda a: a.score.total, reverse=True)

        # Categorize and transform
        output = [
            self._to_output(article, position, preset_category)
            for position, article in enumerate(ranked, start=1)
        ]
        self.logger.info(f"Stage 3: Produced {len(output)} output articles")

        return output

    def process_for_category(self, raw_articles: Sequence[RawArticle], category_slug: str) -> List[OutputArticle]:
        """
        Process a batch fetched for one category.

        Raises:
            PipelineError: If ``category_slug`` is not a configured category
        """
        category = self.categorizer.get_category_by_slug(category_slug)
        if category is None:
            raise PipelineError(f"Category not found: {category_slug}")
        return self.process(raw_articles, preset_category=category)

    def _to_output(
        self,
        scored: ScoredArticle,
        position: int,
        preset_category: Optional[CategoryRule]
    ) -> OutputArticle:
        article = scored.article

        if preset_category is not None:
            category = preset_category.name
        else:
            category = self.categorizer.assign_category(article, scored.source_profile)

        image = article.url_to_image or placeholder_for_seed(
            f"{article.url}|{article.title}|{article.published_at}"
        )
        source_name = scored.source_profile.name if scored.source_profile else article.source_name

        return OutputArticle(
            id=position,
            title=article.title,
            description=article.description or NO_DESCRIPTION,
            url=article.url,
            url_to_image=image,
            published_at=article.published_at,
            category=category,
            score=int(round_half_up(scored.score.total)),
            source_name=source_name
        )
