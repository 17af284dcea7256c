"""Configuration management for the news ranking pipeline."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .models import CategoryKeywords, CategoryRule, SourceProfile

DEFAULTS_DIR = Path(__file__).parent / "defaults"
DEFAULT_SOURCES_FILE = DEFAULTS_DIR / "sources.yaml"
DEFAULT_CATEGORIES_FILE = DEFAULTS_DIR / "categories.yaml"

AUTHORITY_BY_TIER = {1: 100, 2: 80, 3: 60}


@dataclass
class ScoringWeights:
    """Weights of the five scoring factors; must sum to 1.0."""
    source_authority: float = 0.30
    recency: float = 0.25
    image_quality: float = 0.15
    title_quality: float = 0.20
    description_quality: float = 0.10

    def total(self) -> float:
        return (
            self.source_authority + self.recency + self.image_quality +
            self.title_quality + self.description_quality
        )


@dataclass
class DeduplicationConfig:
    """Configuration for title-based deduplication."""
    word_count: int = 8
    similarity_threshold: float = 0.8
    min_containment_words: int = 5
    preferred_sources: List[str] = field(default_factory=list)
    preference_margin: float = 5.0


@dataclass
class CategorizationConfig:
    """Configuration for keyword categorization."""
    min_score: int = 3
    confidence_ceiling: int = 20
    fallback_category: str = "General"


@dataclass
class NewsAPIConfig:
    """Configuration for the NewsAPI fetch collaborator."""
    api_key: Optional[str] = None
    base_url: str = "https://newsapi.org/v2/everything"
    page_size: int = 100
    language: str = "en"
    timeout: float = 10.0
    daily_limit: int = 500
    warning_threshold: int = 450


@dataclass
class Config:
    """Main application configuration."""
    sources: List[SourceProfile]
    categories: List[CategoryRule]
    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    deduplication: DeduplicationConfig = field(default_factory=DeduplicationConfig)
    categorization: CategorizationConfig = field(default_factory=CategorizationConfig)
    newsapi: NewsAPIConfig = field(default_factory=NewsAPIConfig)
    log_level: str = "INFO"
    log_file: Optional[Path] = None


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return data


def parse_sources(entries: List[Dict[str, Any]]) -> List[SourceProfile]:
    """
    Build source profiles from configuration entries.

    Args:
        entries: List of dicts with domain, tier, name, categories and
            optionally authority_score (derived from tier when omitted)

    Returns:
        List of SourceProfile in configuration order

    Raises:
        ConfigError: If an entry is missing required fields
    """
    sources = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError(f"Invalid source entry: {entry!r}")
        try:
            tier = int(entry['tier'])
            sources.append(SourceProfile(
                domain=entry['domain'],
                tier=tier,
                authority_score=int(entry.get('authority_score', AUTHORITY_BY_TIER.get(tier, 40))),
                name=entry.get('name', entry['domain']),
                categories=list(entry.get('categories', []))
            ))
        except KeyError as e:
            raise ConfigError(f"Source configuration missing field {e}: {entry!r}")
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid source configuration {entry!r}: {e}")
    return sources


def parse_categories(entries: List[Dict[str, Any]]) -> List[CategoryRule]:
    """
    Build category rules from configuration entries, preserving order.

    Raises:
        ConfigError: If an entry is missing its slug or name
    """
    categories = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError(f"Invalid category entry: {entry!r}")
        keywords = entry.get('keywords') or {}
        try:
            categories.append(CategoryRule(
                slug=entry['slug'],
                name=entry['name'],
                description=entry.get('description', ''),
                keywords=CategoryKeywords(
                    strong=[str(k) for k in keywords.get('strong', [])],
                    weak=[str(k) for k in keywords.get('weak', [])],
                    exclude=[str(k) for k in keywords.get('exclude', [])]
                ),
                preferred_sources=list(entry.get('preferred_sources', [])),
                queries=list(entry.get('queries', []))
            ))
        except KeyError as e:
            raise ConfigError(f"Category configuration missing field {e}: {entry!r}")
    return categories


def load_default_sources() -> List[SourceProfile]:
    """Load the packaged source whitelist."""
    return parse_sources(_read_yaml(DEFAULT_SOURCES_FILE).get('sources', []))


def load_default_categories() -> List[CategoryRule]:
    """Load the packaged category rule set."""
    return parse_categories(_read_yaml(DEFAULT_CATEGORIES_FILE).get('categories', []))


def default_config() -> Config:
    """Build a configuration from packaged defaults only."""
    return Config(
        sources=load_default_sources(),
        categories=load_default_categories()
    )


def load_config(config_path: str = "config/config.yaml") -> Config:
    """
    Load configuration from YAML file and environment variables.

    Sections that are absent fall back to packaged defaults, so an empty
    file yields the stock source whitelist and category rules.

    Args:
        config_path: Path to the configuration YAML file

    Returns:
        Config object with all settings

    Raises:
        ConfigError: If configuration is invalid or missing
    """
    load_dotenv()

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    yaml_config = _read_yaml(path)

    if 'sources' in yaml_config:
        sources = parse_sources(yaml_config.get('sources') or [])
    else:
        sources = load_default_sources()

    if 'categories' in yaml_config:
        categories = parse_categories(yaml_config.get('categories') or [])
    else:
        categories = load_default_categories()

    try:
        scoring = ScoringWeights(**(yaml_config.get('scoring') or {}))
        deduplication = DeduplicationConfig(**(yaml_config.get('deduplication') or {}))
        categorization = CategorizationConfig(**(yaml_config.get('categorization') or {}))
        newsapi = NewsAPIConfig(**(yaml_config.get('newsapi') or {}))
    except TypeError as e:
        raise ConfigError(f"Unknown configuration field: {e}")

    newsapi.api_key = os.getenv('NEWS_API_KEY') or newsapi.api_key

    logging_config = yaml_config.get('logging') or {}
    log_level = os.getenv('LOG_LEVEL') or logging_config.get('level', 'INFO')
    log_file = logging_config.get('file')

    config = Config(
        sources=sources,
        categories=categories,
        scoring=scoring,
        deduplication=deduplication,
        categorization=categorization,
        newsapi=newsapi,
        log_level=str(log_level).upper(),
        log_file=Path(log_file) if log_file else None
    )
    validate_config(config)
    return config


def validate_config(config: Config) -> None:
    """
    Validate configuration object.

    Args:
        config: Configuration object to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    if abs(config.scoring.total() - 1.0) > 1e-6:
        raise ConfigError(
            f"Scoring weights must sum to 1.0, got {config.scoring.total():.3f}"
        )

    for source in config.sources:
        if source.tier not in AUTHORITY_BY_TIER:
            raise ConfigError(f"Invalid tier {source.tier} for source '{source.domain}'. Must be 1, 2 or 3.")
        if not (0 <= source.authority_score <= 100):
            raise ConfigError(
                f"Invalid authority_score {source.authority_score} for source '{source.domain}'"
            )

    seen_slugs = set()
    for category in config.categories:
        if category.slug in seen_slugs:
            raise ConfigError(f"Duplicate category slug: {category.slug}")
        seen_slugs.add(category.slug)

    dedup = config.deduplication
    if not (0 < dedup.similarity_threshold <= 1):
        raise ConfigError(
            f"Invalid similarity_threshold: {dedup.similarity_threshold}. Must be in (0, 1]."
        )
    if dedup.word_count < 1:
        raise ConfigError(f"Invalid word_count: {dedup.word_count}")

    if config.categorization.confidence_ceiling <= 0:
        raise ConfigError("confidence_ceiling must be positive")

    if config.newsapi.warning_threshold > config.newsapi.daily_limit:
        raise ConfigError("newsapi.warning_threshold cannot exceed newsapi.daily_limit")

    if not isinstance(logging.getLevelName(config.log_level), int):
        raise ConfigError(f"Invalid log level: {config.log_level}")
