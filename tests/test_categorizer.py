"""Unit tests for keyword categorization"""

import pytest

from news_ranker.config import CategorizationConfig, load_default_categories, load_default_sources
from news_ranker.models import (
    ArticleSource,
    CategoryKeywords,
    CategoryRule,
    RawArticle,
    SourceProfile
)
from news_ranker.processing.categorizer import Categorizer
from news_ranker.sources import SourceRegistry


@pytest.fixture
def categorizer():
    """Categorizer over the packaged category rules."""
    return Categorizer(load_default_categories())


@pytest.fixture
def synthetic():
    """Categorizer over two small rule sets that share a keyword."""
    rules = [
        CategoryRule(
            slug="alpha",
            name="Alpha",
            keywords=CategoryKeywords(strong=["rocket"], weak=["orbit"], exclude=["toy"])
        ),
        CategoryRule(
            slug="beta",
            name="Beta",
            keywords=CategoryKeywords(strong=["rocket"])
        ),
    ]
    return Categorizer(rules)


class TestDefaultRules:
    """Test categorization with the packaged rule set."""

    def test_politics_example(self, categorizer):
        result = categorizer.categorize({
            'title': "Senate passes climate legislation",
            'description': "Congress votes"
        })

        assert result.category == "Politics"
        # senate +3, legislation +3, congress +2, vote +2
        assert result.scores[0].category == "Politics"
        assert result.scores[0].score == 10
        assert result.confidence == 50

    def test_empty_article_is_general(self, categorizer):
        result = categorizer.categorize({'title': "", 'description': ""})

        assert result.category == "General"
        assert result.confidence == 0

    def test_technology(self, categorizer):
        result = categorizer.categorize(RawArticle(
            title="Startup unveils AI software platform for developers",
            url="https://example.com/a",
            published_at="2024-05-01T10:00:00Z",
            description="The app uses machine learning to help programming teams"
        ))
        assert result.category == "Technology"

    def test_sports(self, categorizer):
        result = categorizer.categorize({
            'title': "Championship game ends in overtime as team wins the tournament",
            'description': "The league playoff drew a record crowd"
        })
        assert result.category == "Sports"

    def test_scores_cover_every_category(self, categorizer):
        result = categorizer.categorize({'title': "Anything", 'description': ""})
        assert len(result.scores) == len(categorizer.categories)

    def test_category_lookup(self, categorizer):
        assert categorizer.get_category_by_slug("science").name == "Science"
        assert categorizer.get_category_by_slug("weather") is None
        assert categorizer.get_category_by_name("health").slug == "health"
        assert categorizer.category_slugs() == [
            "politics", "technology", "science", "entertainment", "sports", "health"
        ]


class TestScoringRules:
    """Test keyword weights with a synthetic rule set."""

    def test_tie_goes_to_first_declared(self, synthetic):
        result = synthetic.categorize({'title': "rocket launch", 'description': ""})

        assert result.category == "Alpha"
        assert [s.score for s in result.scores] == [3, 3]
        assert result.confidence == 15

    def test_exclude_keyword_penalty(self, synthetic):
        result = synthetic.categorize({'title': "toy rocket", 'description': ""})

        assert result.category == "Beta"
        assert result.scores[-1].category == "Alpha"
        assert result.scores[-1].score == -2

    def test_below_min_score_is_fallback(self, synthetic):
        # strong keyword only in the description scores 2, under the minimum of 3
        result = synthetic.categorize({'title': "news", 'description': "a rocket"})

        assert result.category == "General"
        assert result.confidence == 0

    def test_weak_keyword(self, synthetic):
        result = synthetic.categorize({'title': "orbit", 'description': ""})
        assert result.scores[0].category == "Alpha"
        assert result.scores[0].score == 1

    def test_source_hint(self, synthetic):
        profile = SourceProfile(domain="beta.com", tier=1, authority_score=100, name="Beta Daily", categories=["Beta"])

        result = synthetic.categorize({'title': "rocket", 'description': ""}, profile)

        assert result.category == "Beta"
        assert result.confidence == 40

    def test_confidence_capped(self):
        rule = CategoryRule(
            slug="alpha",
            name="Alpha",
            keywords=CategoryKeywords(strong=["one", "two", "three", "four", "five", "six", "seven", "eight"])
        )
        categorizer = Categorizer([rule])

        result = categorizer.categorize({'title': "one two three four five six seven eight", 'description': ""})

        assert result.scores[0].score == 24
        assert result.confidence == 100

    def test_from_config(self):
        rules = [CategoryRule(slug="alpha", name="Alpha", keywords=CategoryKeywords(strong=["rocket"]))]
        config = CategorizationConfig(min_score=1, confidence_ceiling=10, fallback_category="Other")
        categorizer = Categorizer.from_config(rules, config)

        assert categorizer.categorize({'title': "x", 'description': "rocket"}).confidence == 20
        assert categorizer.categorize({'title': "x", 'description': ""}).category == "Other"


class TestBatchHelpers:
    """Test batch, filter and distribution helpers."""

    def test_categorize_batch_with_source_lookup(self, synthetic):
        registry = SourceRegistry([
            SourceProfile(domain="beta.com", tier=1, authority_score=100, name="Beta Daily", categories=["Beta"])
        ])
        articles = [
            {'title': "rocket", 'description': "", 'source': {'id': None, 'name': "Beta Daily"}},
            {'title': "rocket", 'description': ""},
            {'title': "nothing", 'description': ""},
        ]

        assert synthetic.categorize_batch(articles, registry.find) == ["Beta", "Alpha", "General"]

    def test_categorize_batch_raw_articles(self, categorizer):
        registry = SourceRegistry(load_default_sources())
        article = RawArticle(
            title="Quarterly results",
            url="https://espn.com/a",
            published_at="2024-05-01T10:00:00Z",
            source=ArticleSource(name="ESPN")
        )
        # source hint alone (+5) clears the minimum
        assert categorizer.categorize_batch([article], registry.find) == ["Sports"]

    def test_filter_trusts_assigned_category(self, synthetic):
        articles = [
            {'title': "rocket", 'description': "", 'category': "Beta"},
            {'title': "rocket", 'description': ""},
            {'title': "nothing", 'description': ""},
        ]

        assert synthetic.filter_by_category(articles, "Beta") == [articles[0]]
        assert synthetic.filter_by_category(articles, "Alpha") == [articles[1]]

    def test_distribution(self, synthetic):
        articles = [
            {'title': "rocket", 'description': ""},
            {'title': "toy rocket", 'description': ""},
            {'title': "nothing", 'description': ""},
        ]

        assert synthetic.category_distribution(articles) == {"Alpha": 1, "Beta": 1, "General": 1}

    def test_validate_category_match(self, categorizer):
        article = {'title': "Senate passes climate legislation", 'description': "Congress votes"}

        assert categorizer.validate_category_match(article, "Politics")
        assert not categorizer.validate_category_match(article, "Politics", min_confidence=60)
        assert not categorizer.validate_category_match(article, "Science")

    def test_suggested_categories(self, categorizer):
        article = {'title': "Senate passes climate legislation", 'description': "Congress votes"}

        suggestions = categorizer.suggested_categories(article, limit=2)

        assert [s.category for s in suggestions] == ["Politics", "Science"]
