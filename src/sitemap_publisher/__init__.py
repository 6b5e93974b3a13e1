"""
Sitemap Publisher

Collects page URLs and renders them into sitemaps.org compliant XML files.

Key Features:
- Validates change frequency and priority of every URL on insertion
- Generates sitemap.xml with the 50,000 URL and 10 MiB limits enforced
- Optionally splits large URL sets across several sitemap files
- Builds sitemap-index.xml referencing every generated sitemap
- Writes the files and pings search engines with the new sitemap location
"""

__version__ = "1.0.0"

from .errors import (
    EmptyInputError,
    InvalidInputError,
    NothingToWriteError,
    NotReadyError,
    SitemapError,
    SitemapTooLargeError,
    TooManyUrlsError,
)
from .types import ChangeFrequency, PingResult, UrlInput, UrlRecord
from .url_registry import UrlRegistry
from .sitemap_writer import SitemapWriter
from .publisher import AiohttpClient, LocalFileWriter, Publisher
from .generator import SitemapGenerator
from .config import PublisherConfig, get_config_from_env
from .main import main

__all__ = [
    "ChangeFrequency",
    "UrlRecord",
    "UrlInput",
    "PingResult",
    "PublisherConfig",
    "UrlRegistry",
    "SitemapWriter",
    "Publisher",
    "LocalFileWriter",
    "AiohttpClient",
    "SitemapGenerator",
    "get_config_from_env",
    "main",
    "SitemapError",
    "InvalidInputError",
    "EmptyInputError",
    "TooManyUrlsError",
    "SitemapTooLargeError",
    "NothingToWriteError",
    "NotReadyError",
]
