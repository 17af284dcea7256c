"""News ranking pipeline: score, deduplicate and categorize article batches."""

from .config import Config, ConfigError, default_config, load_config
from .orchestrator import ArticlePipeline, PipelineError

__version__ = "0.1.0"

__all__ = [
    'ArticlePipeline',
    'Config',
    'ConfigError',
    'PipelineError',
    'default_config',
    'load_config'
]
