"""Fetchers package for upstream news sources."""

from .newsapi import FetchError, FetchRequest, NewsAPIFetcher

__all__ = [
    'FetchError',
    'FetchRequest',
    'NewsAPIFetcher'
]
