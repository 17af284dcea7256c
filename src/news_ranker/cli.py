"""Command-line interface for the news ranking pipeline."""

import asyncio
import json
import logging
import os
import sys

import click
from dotenv import load_dotenv

from .config import Config, ConfigError, default_config, load_config
from .fetchers.newsapi import FetchError, NewsAPIFetcher
from .logger import setup_logger
from .models import RawArticle
from .orchestrator import ArticlePipeline, PipelineError
from .quota import QuotaTracker
from .service import NewsService


def _load(config_path):
    if config_path:
        return load_config(config_path)
    load_dotenv()
    config = default_config()
    config.newsapi.api_key = os.getenv('NEWS_API_KEY')
    return config


def _emit(articles, output):
    json.dump([article.to_dict() for article in articles], output, indent=2, ensure_ascii=False)
    output.write("\n")


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to config YAML")
@click.option("--log-level", default=None, help="Log level (overrides config)")
@click.pass_context
def cli(ctx, config_path, log_level):
    """Score, deduplicate and categorize news articles."""
    try:
        config = _load(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    level_name = (log_level or config.log_level).upper()
    setup_logger(log_file=config.log_file, level=getattr(logging, level_name, logging.INFO))
    ctx.obj = config


@cli.command()
@click.argument("input_file", type=click.File("r"))
@click.option("--category", "category_slug", help="Label every article with this category slug")
@click.option("--output", "-o", type=click.File("w"), default="-", help="Output file (default: stdout)")
@click.pass_obj
def process(config: Config, input_file, category_slug, output):
    """Run the pipeline over a saved NewsAPI response or article list."""
    try:
        data = json.load(input_file)
    except json.JSONDecodeError as e:
        click.echo(f"Error: {input_file.name} is not valid JSON: {e}", err=True)
        sys.exit(1)

    records = (data.get('articles') or []) if isinstance(data, dict) else data
    if not isinstance(records, list) or not all(isinstance(record, dict) for record in records):
        click.echo(f"Error: {input_file.name} must hold a list of article objects", err=True)
        sys.exit(1)

    raw_articles = [RawArticle.from_dict(record) for record in records if record.get('title')]

    pipeline = ArticlePipeline(config)
    try:
        if category_slug:
            articles = pipeline.process_for_category(raw_articles, category_slug)
        else:
            articles = pipeline.process(raw_articles)
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _emit(articles, output)


@cli.command()
@click.argument("strategy", type=click.Choice(["homepage", "category", "search"]))
@click.option("--category", "category_slug", help="Category slug for the category strategy")
@click.option("--query", help="Search text for the search strategy")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--output", "-o", type=click.File("w"), default="-", help="Output file (default: stdout)")
@click.pass_obj
def fetch(config: Config, strategy, category_slug, query, page, output):
    """Fetch articles from NewsAPI and run them through the pipeline."""
    if strategy == "category" and not category_slug:
        raise click.UsageError("--category is required for the category strategy")

    quota = QuotaTracker(
        daily_limit=config.newsapi.daily_limit,
        warning_threshold=config.newsapi.warning_threshold
    )
    pipeline = ArticlePipeline(config)
    fetcher = NewsAPIFetcher(config.newsapi, pipeline.registry, quota)
    service = NewsService(fetcher, pipeline)

    try:
        if strategy == "homepage":
            articles = asyncio.run(service.homepage(page=page))
        elif strategy == "category":
            articles = asyncio.run(service.by_category(category_slug, page=page))
        else:
            articles = asyncio.run(service.search(query or "", page=page))
    except (FetchError, PipelineError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _emit(articles, output)


@cli.command()
@click.argument("title")
@click.option("--description", default="", help="Article description")
@click.pass_obj
def categorize(config: Config, title, description):
    """Show which category a headline would be assigned."""
    pipeline = ArticlePipeline(config)
    result = pipeline.categorizer.categorize({'title': title, 'description': description})

    click.echo(f"{result.category} (confidence {result.confidence})")
    for entry in result.scores:
        click.echo(f"  {entry.category}: {entry.score}")


if __name__ == "__main__":
    cli()
