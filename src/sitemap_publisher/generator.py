"""Sitemap generator that coordinates the registry, writer and publisher."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from .config import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
    MAX_SITEMAP_BYTES,
    MAX_URLS_PER_SITEMAP,
    SITEMAP_FILE_NAME,
    PublisherConfig,
    build_search_engine_list,
)
from .publisher import AiohttpClient, FileWriter, HttpClient, LocalFileWriter, Publisher
from .sitemap_writer import SitemapWriter
from .types import (
    ChangeFrequency,
    PingResult,
    SitemapDocument,
    SitemapIndexDocument,
    UrlInput,
    UrlRecord,
)
from .url_registry import UrlRegistry

logger = logging.getLogger(__name__)


class SitemapGenerator:
    """Builds, writes and announces the sitemaps of one site.

    One instance models one generation run and is not meant to be shared
    between threads.
    """

    def __init__(
        self,
        base_url: str,
        base_path: str = "",
        additional_search_engines: Optional[List[str]] = None,
        search_engines: Optional[List[str]] = None,
        file_writer: Optional[FileWriter] = None,
        http_client: Optional[HttpClient] = None,
        max_urls_per_sitemap: int = MAX_URLS_PER_SITEMAP,
        max_sitemap_bytes: int = MAX_SITEMAP_BYTES,
        request_timeout: int = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        self.base_url = base_url
        self.base_path = base_path
        self.search_engines = build_search_engine_list(
            additional=additional_search_engines,
            replace_with=search_engines
        )

        # Only a client created here is closed after pinging
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = AiohttpClient(timeout=request_timeout, user_agent=user_agent)

        self.registry = UrlRegistry()
        self.sitemap_writer = SitemapWriter(
            base_url=base_url,
            registry=self.registry,
            max_urls_per_sitemap=max_urls_per_sitemap,
            max_sitemap_bytes=max_sitemap_bytes
        )
        self.publisher = Publisher(
            writer=self.sitemap_writer,
            base_path=base_path,
            file_writer=file_writer or LocalFileWriter(),
            http_client=http_client,
            search_engines=self.search_engines
        )

    @classmethod
    def from_config(
        cls,
        config: PublisherConfig,
        file_writer: Optional[FileWriter] = None,
        http_client: Optional[HttpClient] = None
    ) -> "SitemapGenerator":
        """Create a generator from a PublisherConfig."""
        return cls(
            base_url=config.base_url,
            base_path=config.base_path,
            additional_search_engines=config.additional_search_engines,
            file_writer=file_writer,
            http_client=http_client,
            max_urls_per_sitemap=config.max_urls_per_sitemap,
            max_sitemap_bytes=config.max_sitemap_bytes,
            request_timeout=config.request_timeout,
            user_agent=config.user_agent
        )

    @property
    def urls(self) -> Tuple[UrlRecord, ...]:
        return self.registry.urls

    @property
    def sitemaps(self) -> Dict[str, SitemapDocument]:
        return dict(self.sitemap_writer.sitemaps)

    @property
    def sitemap_index(self) -> Optional[SitemapIndexDocument]:
        return self.sitemap_writer.sitemap_index

    @property
    def sitemap_full_url(self) -> Optional[str]:
        return self.sitemap_writer.sitemap_full_url

    def add_url(
        self,
        location: str,
        priority: Any,
        change_frequency: Union[str, ChangeFrequency],
        last_modified: Optional[Union[str, datetime]] = None
    ) -> UrlRecord:
        return self.registry.add_url(location, priority, change_frequency, last_modified)

    def add_urls(self, items: Iterable[Union[UrlInput, Mapping[str, Any]]]) -> int:
        return self.registry.add_urls(items)

    def create_sitemap(self) -> SitemapDocument:
        return self.sitemap_writer.create_sitemap()

    def create_chunked_sitemaps(self) -> List[SitemapDocument]:
        return self.sitemap_writer.create_chunked_sitemaps()

    def create_sitemap_index(self) -> SitemapIndexDocument:
        return self.sitemap_writer.create_sitemap_index()

    def get_sitemap_string(self, file_name: str = SITEMAP_FILE_NAME) -> str:
        return self.sitemap_writer.get_sitemap_string(file_name)

    def write_sitemap(self, include_robots: bool = False) -> List[str]:
        """Write generated documents under the base path."""
        return self.publisher.write(include_robots=include_robots)

    async def notify_search_engines(self) -> List[PingResult]:
        """Ping the configured search engines.

        A client created by the generator is closed afterwards; a client
        passed in by the caller is left open.
        """
        try:
            return await self.publisher.notify_search_engines()
        finally:
            if self._owns_http_client:
                await self.publisher.http_client.close()
