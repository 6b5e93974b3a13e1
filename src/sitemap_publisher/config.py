"""Configuration and constants for the sitemap publisher."""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern

# sitemaps.org protocol
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
MAX_URLS_PER_SITEMAP = 50000
MAX_SITEMAP_BYTES = 10485760  # 10 MiB uncompressed

# Documented limit, only warned about when exceeded
URL_LENGTH = 2048

# Output file names
SITEMAP_FILE_NAME = "sitemap.xml"
SITEMAP_INDEX_FILE_NAME = "sitemap-index.xml"
ROBOTS_FILE_NAME = "robots.txt"
CHUNKED_SITEMAP_FILE_NAME = "sitemap-{:03d}.xml"
CHUNKED_SITEMAP_PATTERN: Pattern[str] = re.compile(r"^sitemap-\d{3,}\.xml$")

# Priorities are compared as strings
ALLOWED_PRIORITIES = (
    "1",
    "0.9",
    "0.8",
    "0.7",
    "0.6",
    "0.5",
    "0.4",
    "0.3",
    "0.2",
    "0.1",
)
DEFAULT_PRIORITY = "0.5"

# Ping endpoints; the sitemap URL is appended to each
DEFAULT_SEARCH_ENGINES: List[str] = [
    "http://search.yahooapis.com/SiteExplorerService/V1/ping?sitemap=",
    "http://www.google.com/webmasters/tools/ping?sitemap=",
    "http://submissions.ask.com/ping?sitemap=",
    "http://www.bing.com/webmaster/ping.aspx?siteMap=",
]

# File paths
DEFAULT_SITEMAP_OUTPUT_DIR = "data/sitemap/"

# HTTP configuration
DEFAULT_REQUEST_TIMEOUT = 30  # seconds
DEFAULT_USER_AGENT = "Sitemap-Publisher/1.0"
DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass
class PublisherConfig:
    """Configuration for one generation run."""
    base_url: str
    base_path: str = DEFAULT_SITEMAP_OUTPUT_DIR
    additional_search_engines: List[str] = field(default_factory=list)
    max_urls_per_sitemap: int = MAX_URLS_PER_SITEMAP
    max_sitemap_bytes: int = MAX_SITEMAP_BYTES
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


def get_config_from_env() -> PublisherConfig:
    """Create configuration from environment variables with defaults."""
    engines_str = os.getenv("SITEMAP_SEARCH_ENGINES", "")
    additional_engines = [url.strip() for url in engines_str.split(",") if url.strip()]

    return PublisherConfig(
        base_url=os.getenv("SITEMAP_BASE_URL", ""),
        base_path=os.getenv("SITEMAP_OUTPUT_DIR", DEFAULT_SITEMAP_OUTPUT_DIR),
        additional_search_engines=additional_engines,
        max_urls_per_sitemap=int(os.getenv("SITEMAP_MAX_URLS", MAX_URLS_PER_SITEMAP)),
        max_sitemap_bytes=int(os.getenv("SITEMAP_MAX_BYTES", MAX_SITEMAP_BYTES)),
        request_timeout=int(os.getenv("SITEMAP_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
        user_agent=os.getenv("SITEMAP_USER_AGENT", DEFAULT_USER_AGENT),
    )


def build_search_engine_list(
    additional: Optional[List[str]] = None,
    replace_with: Optional[List[str]] = None
) -> List[str]:
    """Return a fresh ping template list: defaults or a replacement, plus extras."""
    base = list(replace_with) if replace_with is not None else list(DEFAULT_SEARCH_ENGINES)
    if additional:
        base.extend(additional)
    return base
