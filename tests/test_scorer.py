"""Unit tests for article scoring"""

from datetime import datetime, timedelta, timezone

import pytest

from news_ranker.config import ScoringWeights, load_default_sources
from news_ranker.models import (
    ArticleScore,
    ArticleSource,
    RawArticle,
    ScoreBreakdown,
    SourceProfile
)
from news_ranker.processing.scorer import (
    ArticleScorer,
    is_trending,
    parse_timestamp,
    round_half_up,
    score_tier,
    should_feature
)
from news_ranker.sources import SourceRegistry

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

TIER_1 = SourceProfile(
    domain="nature.com",
    tier=1,
    authority_score=100,
    name="Nature",
    categories=["Science", "Health"]
)


def iso(delta: timedelta) -> str:
    return (NOW - delta).isoformat().replace('+00:00', 'Z')


def make_article(**overrides) -> RawArticle:
    fields = {
        'title': "Example headline",
        'url': "https://example.com/story",
        'published_at': iso(timedelta(hours=1)),
        'description': None,
        'url_to_image': None,
        'source': ArticleSource(name="Example"),
    }
    fields.update(overrides)
    return RawArticle(**fields)


def make_score(total: float, recency: float = 100) -> ArticleScore:
    return ArticleScore(
        total=total,
        breakdown=ScoreBreakdown(
            source_authority=100,
            recency=recency,
            image_quality=50,
            title_quality=50,
            description_quality=30
        )
    )


@pytest.fixture
def scorer():
    return ArticleScorer(clock=lambda: NOW)


class TestRounding:
    """Test half-up rounding helpers."""

    def test_round_half_up_whole(self):
        assert round_half_up(72.5) == 73
        assert round_half_up(73.5) == 74
        assert round_half_up(72.4) == 72

    def test_round_half_up_one_decimal(self):
        assert round_half_up(14.25, 1) == pytest.approx(14.3)
        assert round_half_up(80.0, 1) == 80.0


class TestTimestampParsing:
    """Test publish timestamp parsing."""

    def test_parse_zulu(self):
        parsed = parse_timestamp("2024-05-01T10:00:00Z")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_parse_seven_digit_fraction(self):
        parsed = parse_timestamp("2024-01-15T10:30:00.1234567Z")
        assert parsed == datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)

    def test_parse_short_fraction(self):
        parsed = parse_timestamp("2024-01-15T10:30:00.1Z")
        assert parsed == datetime(2024, 1, 15, 10, 30, 0, 100000, tzinfo=timezone.utc)

    def test_parse_fraction_with_offset(self):
        parsed = parse_timestamp("2024-01-15T12:30:00.12345+02:00")
        assert parsed == datetime(2024, 1, 15, 10, 30, 0, 123450, tzinfo=timezone.utc)

    def test_parse_naive_assumes_utc(self):
        parsed = parse_timestamp("2024-05-01T10:00:00")
        assert parsed.tzinfo is not None

    def test_parse_invalid(self):
        assert parse_timestamp("yesterday-ish") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None


class TestSubScores:
    """Test each scoring factor in isolation."""

    def test_source_authority_unknown(self, scorer):
        assert scorer._score_source_authority(None) == 40

    def test_source_authority_profile(self, scorer):
        assert scorer._score_source_authority(TIER_1) == 100

    @pytest.mark.parametrize("hours,expected", [
        (0, 100),
        (5.9, 100),
        (6, 90),
        (23, 90),
        (48, 70),
        (100, 50),
        (200, 30),
        (400, 10),
    ])
    def test_recency_steps(self, scorer, hours, expected):
        assert scorer._score_recency(iso(timedelta(hours=hours))) == expected

    def test_recency_unparseable(self, scorer):
        assert scorer._score_recency("not a date") == 10
        assert scorer._score_recency(None) == 10

    @pytest.mark.parametrize("url,expected", [
        (None, 0),
        ("", 0),
        ("https://example.com/photo.jpg", 40),
        ("http://example.com/photo.jpg", 30),
        ("https://cdn.example.com/photo.jpg", 50),
        ("http://images.example.com/photo.jpg", 40),
        ("ftp://example.com/photo.jpg", 0),
    ])
    def test_image_quality(self, scorer, url, expected):
        assert scorer._score_image_quality(url) == expected

    def test_title_empty(self, scorer):
        assert scorer._score_title_quality("") == 0

    def test_title_ideal_length_with_keyword(self, scorer):
        title = "Scientists report a breakthrough in solid-state battery energy storage"
        assert len(title) == 70
        assert scorer._score_title_quality(title) == 50

    def test_title_clickbait_penalty(self, scorer):
        # 37 chars: base 20 + 15, clickbait -20
        assert scorer._score_title_quality("You won't believe this amazing gadget") == 15

    def test_title_all_caps_penalty(self, scorer):
        # 25 chars: base 20 + 5, "breaking" +10, all caps -10
        assert scorer._score_title_quality("BREAKING NEWS ABOUT STUFF") == 25

    def test_title_short_caps_not_penalized(self, scorer):
        assert scorer._score_title_quality("NASA") == 25

    @pytest.mark.parametrize("length,expected", [
        (0, 0),
        (10, 0),
        (30, 10),
        (60, 20),
        (150, 30),
        (300, 30),
        (400, 20),
    ])
    def test_description_quality(self, scorer, length, expected):
        description = "x" * length if length else None
        assert scorer._score_description_quality(description) == expected


class TestArticleScorer:
    """Test the weighted total."""

    def test_best_case_without_description(self, scorer):
        article = make_article(
            title="Scientists report a breakthrough in solid-state battery energy storage",
            published_at=iso(timedelta(0)),
            url_to_image="https://cdn.example.com/battery.jpg"
        )

        score = scorer.score(article, TIER_1)

        assert score.breakdown.source_authority == 100
        assert score.breakdown.recency == 100
        assert score.breakdown.image_quality == 50
        assert score.breakdown.title_quality == 50
        assert score.total == pytest.approx(72.5)

    def test_best_case_is_trending_but_not_featured(self, scorer):
        article = make_article(
            title="Scientists report a breakthrough in solid-state battery energy storage",
            published_at=iso(timedelta(0)),
            url_to_image="https://cdn.example.com/battery.jpg",
            description="d" * 150
        )

        score = scorer.score(article, TIER_1)

        # 30 + 25 + 7.5 + 10 + 3 is the highest reachable total
        assert score.total == pytest.approx(75.5)
        assert is_trending(score)
        assert not should_feature(score)

    def test_worst_case(self, scorer):
        article = make_article(title="", published_at="garbage")
        score = scorer.score(article, None)

        # 40 * 0.30 + 10 * 0.25
        assert score.total == pytest.approx(14.5)

    def test_totals_within_bounds(self, scorer):
        variants = [
            make_article(),
            make_article(title="", description=None, url_to_image=None, published_at=""),
            make_article(title="A" * 200, description="d" * 1000, url_to_image="https://cdn.x/img"),
            make_article(title="You won't believe these shocking numbers", published_at=iso(timedelta(days=90))),
        ]
        for article in variants:
            for profile in (None, TIER_1):
                total = scorer.score(article, profile).total
                assert 0 <= total <= 100

    def test_total_has_one_decimal(self, scorer):
        score = scorer.score(make_article(description="d" * 60), None)
        assert score.total == round_half_up(score.total, 1)

    def test_custom_weights(self):
        weights = ScoringWeights(
            source_authority=1.0,
            recency=0.0,
            image_quality=0.0,
            title_quality=0.0,
            description_quality=0.0
        )
        scorer = ArticleScorer(weights=weights, clock=lambda: NOW)

        assert scorer.score(make_article(), TIER_1).total == 100

    def test_score_articles_resolves_profiles(self, scorer):
        registry = SourceRegistry(load_default_sources())
        articles = [
            make_article(source=ArticleSource(name="TechCrunch")),
            make_article(source=ArticleSource(name="Some Personal Blog")),
            make_article(source=None),
        ]

        scored = scorer.score_articles(articles, registry)

        assert [s.article for s in scored] == articles
        assert scored[0].source_profile.domain == "techcrunch.com"
        assert scored[0].score.breakdown.source_authority == 100
        assert scored[1].source_profile is None
        assert scored[1].score.breakdown.source_authority == 40
        assert scored[2].source_profile is None


class TestThresholds:
    """Test feature, trending and tier helpers."""

    def test_should_feature(self):
        assert should_feature(make_score(80))
        assert not should_feature(make_score(79.9))

    def test_is_trending_requires_recency(self):
        assert is_trending(make_score(76, recency=70))
        assert not is_trending(make_score(76, recency=50))
        assert not is_trending(make_score(74.9, recency=100))

    @pytest.mark.parametrize("total,tier", [
        (85, 'premium'),
        (80, 'premium'),
        (70, 'good'),
        (55, 'standard'),
        (20, 'low'),
    ])
    def test_score_tier(self, total, tier):
        assert score_tier(total) == tier
