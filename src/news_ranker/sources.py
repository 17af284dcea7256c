"""Lookup helpers over the configured source whitelist."""

from typing import Iterable, List, Optional, Sequence

from .models import SourceProfile


class SourceRegistry:
    """Read-only view over source profiles, in configuration order."""

    def __init__(self, sources: Sequence[SourceProfile]):
        self._sources = tuple(sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(self._sources)

    def find(self, identifier: Optional[str]) -> Optional[SourceProfile]:
        """
        Resolve a free-text source name or domain to a profile.

        Matching is case-insensitive substring containment in both
        directions: the profile domain or name containing the identifier,
        or the identifier containing the profile domain. Short identifiers
        can therefore match more than one profile; the first in
        configuration order wins.

        Args:
            identifier: Source name (e.g. "TechCrunch") or domain

        Returns:
            Matching SourceProfile, or None if nothing matches
        """
        if not identifier:
            return None

        normalized = identifier.lower()
        for source in self._sources:
            domain = source.domain.lower()
            if (domain in normalized
                    or normalized in domain
                    or normalized in source.name.lower()):
                return source
        return None

    def all_domains(self) -> str:
        """Comma-separated list of every configured domain."""
        return ",".join(source.domain for source in self._sources)

    def domains_for_categories(self, categories: Iterable[str]) -> str:
        """Comma-separated domains of sources covering any of the categories."""
        wanted = set(categories)
        return ",".join(
            source.domain for source in self._sources
            if wanted.intersection(source.categories)
        )

    def by_tier(self, tier: int) -> List[SourceProfile]:
        return [source for source in self._sources if source.tier == tier]
