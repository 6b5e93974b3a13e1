"""Utility functions for the sitemap publisher."""

import logging
import os
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_current_timestamp() -> str:
    """Get current timestamp in ISO format for sitemaps."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S+00:00")


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601, assuming UTC when it is naive."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def format_number(number: int) -> str:
    """Format number with thousands separators."""
    return f"{number:,}"


def format_size(size_bytes: int) -> str:
    """Format a byte count in megabytes."""
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def is_valid_url(url: str) -> bool:
    """Check if URL is valid and uses HTTP/HTTPS scheme."""
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False


def short_host_label(url: str) -> str:
    """Return the second-level label and TLD of a URL's host, e.g. ``google.com``."""
    host = urlparse(url).hostname or ""
    return ".".join(host.split(".")[-2:])


def html_to_text(content: str) -> str:
    """Strip markup from a response body and fold newlines into spaces."""
    if not content:
        return ""

    text = BeautifulSoup(content, "lxml").get_text()
    return text.replace("\r\n", " ").replace("\n", " ")


def create_directory_if_not_exists(directory: str) -> None:
    """Create directory if it doesn't exist."""
    if directory:
        os.makedirs(directory, exist_ok=True)
