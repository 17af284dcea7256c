"""Deduplication component that collapses coverage of the same story."""

import re
from typing import List, Optional, Sequence, Set

from ..config import DeduplicationConfig
from ..logger import get_logger
from ..models import DeduplicationStats, ScoredArticle

_NON_ALPHANUMERIC = re.compile(r'[^a-z0-9\s]')


def normalize_title(title: str, word_count: int = 8) -> str:
    """
    Normalize a title for duplicate matching.

    Lower-cases, strips everything except ASCII letters, digits and
    whitespace, and keeps the first ``word_count`` words.
    """
    cleaned = _NON_ALPHANUMERIC.sub('', (title or '').lower()).strip()
    return ' '.join(cleaned.split()[:word_count])


def title_similarity(title1: str, title2: str) -> float:
    """Jaccard similarity of the word sets of two normalized titles (0-1)."""
    words1 = set(title1.split(' '))
    words2 = set(title2.split(' '))

    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def _by_score_descending(articles: Sequence[ScoredArticle]) -> List[ScoredArticle]:
    # sorted() is stable, so equal scores keep their input order
    return sorted(articles, key=lambda a: a.score.total, reverse=True)


class Deduplicator:
    """Removes duplicate coverage, keeping the best-scoring version of each story."""

    def __init__(
        self,
        word_count: int = 8,
        similarity_threshold: float = 0.8,
        min_containment_words: int = 5,
        preferred_sources: Sequence[str] = (),
        preference_margin: float = 5.0
    ):
        """
        Initialize deduplicator.

        Args:
            word_count: Number of leading title words compared
            similarity_threshold: Minimum Jaccard similarity (0-1) for titles
                to be considered duplicates
            min_containment_words: Minimum words in the shorter title for a
                substring match to count as a duplicate
            preferred_sources: Source names favoured by
                deduplicate_with_preferences when scores are close
            preference_margin: Score gap under which source preference wins
        """
        self.word_count = word_count
        self.similarity_threshold = similarity_threshold
        self.min_containment_words = min_containment_words
        self.preferred_sources = tuple(s.lower() for s in preferred_sources)
        self.preference_margin = preference_margin
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: DeduplicationConfig) -> 'Deduplicator':
        return cls(
            word_count=config.word_count,
            similarity_threshold=config.similarity_threshold,
            min_containment_words=config.min_containment_words,
            preferred_sources=config.preferred_sources,
            preference_margin=config.preference_margin
        )

    def are_duplicates(self, article1: ScoredArticle, article2: ScoredArticle) -> bool:
        """
        Check whether two articles cover the same story.

        Titles match when their normalized forms are equal, when their
        word-set similarity reaches the threshold, or when one contains
        the other and the shorter has at least ``min_containment_words``.
        """
        normalized1 = normalize_title(article1.title, self.word_count)
        normalized2 = normalize_title(article2.title, self.word_count)

        if normalized1 == normalized2:
            return True

        if title_similarity(normalized1, normalized2) >= self.similarity_threshold:
            return True

        if len(normalized1) < len(normalized2):
            shorter, longer = normalized1, normalized2
        else:
            shorter, longer = normalized2, normalized1

        return shorter in longer and len(shorter.split()) >= self.min_containment_words

    def deduplicate(self, articles: Sequence[ScoredArticle]) -> List[ScoredArticle]:
        """
        Collapse duplicate clusters to their highest-scored article.

        Args:
            articles: Scored articles in any order

        Returns:
            One representative per story, sorted by score descending
        """
        return self._deduplicate(articles, prefer_sources=False)

    def deduplicate_with_preferences(self, articles: Sequence[ScoredArticle]) -> List[ScoredArticle]:
        """
        Like deduplicate, but favour preferred sources when scores are close.

        When a duplicate's score is within ``preference_margin`` of the
        current representative, a preferred-source duplicate replaces a
        non-preferred representative. Larger gaps fall back to score.
        """
        return self._deduplicate(articles, prefer_sources=True)

    def _deduplicate(self, articles: Sequence[ScoredArticle], prefer_sources: bool) -> List[ScoredArticle]:
        if not articles:
            return []

        ordered = _by_score_descending(articles)
        consumed: Set[int] = set()
        unique = []

        for i, current in enumerate(ordered):
            if i in consumed:
                continue
            consumed.add(i)
            best = current

            for j in range(i + 1, len(ordered)):
                if j in consumed:
                    continue

                candidate = ordered[j]
                if not self.are_duplicates(current, candidate):
                    continue

                consumed.add(j)
                best = self._pick(best, candidate, prefer_sources)
                self.logger.debug(
                    f"Duplicate: '{candidate.title}' ({candidate.score.total}) "
                    f"grouped with '{current.title}'"
                )

            unique.append(best)

        result = _by_score_descending(unique)
        self.logger.info(
            f"Deduplicated {len(articles)} -> {len(result)} articles "
            f"({len(articles) - len(result)} removed)"
        )
        return result

    def _pick(self, best: ScoredArticle, candidate: ScoredArticle, prefer_sources: bool) -> ScoredArticle:
        if prefer_sources:
            gap = abs(candidate.score.total - best.score.total)
            if gap < self.preference_margin:
                if self._is_preferred(candidate) and not self._is_preferred(best):
                    return candidate
                return best

        if candidate.score.total > best.score.total:
            return candidate
        return best

    def _is_preferred(self, article: ScoredArticle) -> bool:
        source_name = (article.source_name or '').lower()
        return any(preferred in source_name for preferred in self.preferred_sources)

    def duplicate_groups(self, articles: Sequence[ScoredArticle]) -> List[List[ScoredArticle]]:
        """
        Group articles into duplicate clusters for inspection.

        Args:
            articles: Scored articles; input order is kept within groups

        Returns:
            Clusters with more than one member
        """
        groups = []
        consumed: Set[int] = set()

        for i, article in enumerate(articles):
            if i in consumed:
                continue
            consumed.add(i)
            group = [article]

            for j in range(i + 1, len(articles)):
                if j not in consumed and self.are_duplicates(article, articles[j]):
                    group.append(articles[j])
                    consumed.add(j)

            if len(group) > 1:
                groups.append(group)

        return groups


def deduplication_stats(
    original: Sequence[ScoredArticle],
    deduplicated: Sequence[ScoredArticle]
) -> DeduplicationStats:
    """Summarize how many articles were removed by deduplication."""
    original_count = len(original)
    deduplicated_count = len(deduplicated)
    removed_count = original_count - deduplicated_count
    removal_rate = (removed_count / original_count) * 100 if original_count > 0 else 0.0

    return DeduplicationStats(
        original_count=original_count,
        deduplicated_count=deduplicated_count,
        removed_count=removed_count,
        removal_rate=round(removal_rate, 1)
    )


def deduplicate_articles(
    articles: Sequence[ScoredArticle],
    config: Optional[DeduplicationConfig] = None
) -> List[ScoredArticle]:
    """Convenience function for article deduplication."""
    deduplicator = Deduplicator.from_config(config or DeduplicationConfig())
    return deduplicator.deduplicate(articles)
