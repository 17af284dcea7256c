"""Search query construction for the upstream news API."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional


@dataclass(frozen=True)
class QueryStrategy:
    """Weighted group of queries used in homepage rotation."""
    name: str
    weight: int  # percentage of rotations
    queries: List[str]


MAJOR_EVENTS = QueryStrategy(
    name="Major Events",
    weight=60,
    queries=[
        'announces OR announced OR unveils OR unveiled',
        'launches OR launched OR releases OR released',
        'acquisition OR merger OR bought OR acquires',
        'funding OR investment OR raised OR investors',
        'breakthrough OR discovery OR discovered',
        'controversy OR scandal OR investigation',
        'lawsuit OR sues OR sued OR legal action',
        'crisis OR emergency OR outbreak',
        'historic OR unprecedented OR landmark',
        'breaking OR developing OR urgent',
    ]
)

TRENDING = QueryStrategy(
    name="Trending Topics",
    weight=25,
    queries=[
        'AI OR "artificial intelligence" OR ChatGPT OR OpenAI OR machine learning',
        'climate OR "climate change" OR renewable OR sustainability',
        'election OR political OR congress OR senate OR campaign',
        'cryptocurrency OR bitcoin OR blockchain OR crypto',
        'covid OR pandemic OR vaccine OR health crisis',
        'space OR NASA OR SpaceX OR mars OR asteroid',
        'ukraine OR russia OR conflict OR war',
        'economy OR inflation OR recession OR market crash',
    ]
)

DISCOVERY = QueryStrategy(
    name="Discovery & Innovation",
    weight=15,
    queries=[
        'startup OR innovation OR revolutionary OR groundbreaking',
        'study OR research OR scientist OR scientists',
        'policy OR regulation OR legislation OR law',
        'prototype OR experimental OR testing OR trial',
        'record-breaking OR fastest OR biggest OR first-ever',
        'unveils OR reveals OR debuts OR introduces',
    ]
)

QUERY_STRATEGIES = (MAJOR_EVENTS, TRENDING, DISCOVERY)


def build_rotating_query(rng: Optional[random.Random] = None) -> str:
    """
    Pick a homepage query, choosing the strategy by weight.

    Args:
        rng: Random source; pass a seeded instance for reproducible picks
    """
    rng = rng or random.Random()
    roll = rng.random() * 100
    cumulative = 0

    for strategy in QUERY_STRATEGIES:
        cumulative += strategy.weight
        if roll <= cumulative:
            return rng.choice(strategy.queries)

    major = rng.choice(MAJOR_EVENTS.queries)
    trend = rng.choice(TRENDING.queries)
    return f"({major}) OR ({trend})"


def build_comprehensive_query(rng: Optional[random.Random] = None) -> str:
    """One query from every strategy, OR-ed together."""
    rng = rng or random.Random()
    return " OR ".join(f"({rng.choice(strategy.queries)})" for strategy in QUERY_STRATEGIES)


def days_ago(days: int, now: Optional[datetime] = None) -> str:
    """ISO-8601 timestamp ``days`` before now, for the API's ``from`` filter."""
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=days)).isoformat()


def hours_ago(hours: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(hours=hours)).isoformat()
