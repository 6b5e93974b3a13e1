"""Type definitions for the sitemap publisher."""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional
from enum import Enum

from .config import DEFAULT_PRIORITY
from .errors import InvalidInputError


class ChangeFrequency(Enum):
    """Sitemap change frequency values."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class UrlRecord:
    """A validated URL entry held by the registry."""
    location: str
    priority: str
    change_frequency: str
    last_modified: str


@dataclass
class UrlInput:
    """One item of a batch submission."""
    url: str
    change_frequency: Any
    priority: Any = DEFAULT_PRIORITY
    last_modified: Optional[Any] = None

    @classmethod
    def from_mapping(cls, item: Mapping[str, Any]) -> "UrlInput":
        """Build from a mapping using the ``url``/``changeFrequency`` keys."""
        if not isinstance(item, Mapping):
            raise InvalidInputError(
                f"Batch item must be a mapping or UrlInput, got {type(item).__name__}"
            )

        missing = [key for key in ("url", "changeFrequency") if key not in item]
        if missing:
            raise InvalidInputError(
                f"Batch item is missing required keys: {', '.join(missing)}"
            )

        return cls(
            url=item["url"],
            change_frequency=item["changeFrequency"],
            priority=item.get("priority", DEFAULT_PRIORITY),
            last_modified=item.get("lastModified"),
        )


@dataclass(frozen=True)
class SitemapDocument:
    """A rendered ``urlset`` document."""
    file_name: str
    content: bytes
    url_count: int

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class SitemapIndexDocument:
    """A rendered ``sitemapindex`` document."""
    file_name: str
    content: bytes
    sitemap_locations: List[str] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class HttpResponse:
    """Status and body returned by an HTTP capability."""
    status_code: int
    body: str = ""


@dataclass
class PingResult:
    """Outcome of notifying a single search engine."""
    site: str
    full_site: str
    status_code: int
    message: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300

