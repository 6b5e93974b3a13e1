"""Publishing of generated sitemaps: writing files and pinging search engines."""

import logging
import os
from typing import List, Optional, Protocol
from urllib.parse import quote
import aiohttp
from .config import DEFAULT_HEADERS, DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT, ROBOTS_FILE_NAME
from .errors import NothingToWriteError, NotReadyError
from .sitemap_writer import SitemapWriter
from .types import HttpResponse, PingResult
from .utils import create_directory_if_not_exists, html_to_text, short_host_label

logger = logging.getLogger(__name__)


class FileWriter(Protocol):
    """Capability that persists bytes at a path."""

    def write(self, path: str, data: bytes) -> None:
        ...


class HttpClient(Protocol):
    """Capability that issues a GET request."""

    async def get(self, url: str) -> HttpResponse:
        ...


class LocalFileWriter:
    """Writes files to the local file system."""

    def write(self, path: str, data: bytes) -> None:
        create_directory_if_not_exists(os.path.dirname(path))
        with open(path, "wb") as f:
            f.write(data)
        logger.debug(f"Wrote {len(data)} bytes to {path}")


class AiohttpClient:
    """HTTP capability backed by an aiohttp session.

    Use as an async context manager, or call ``close()`` when done. A
    session is created lazily on the first request otherwise.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session

    async def __aenter__(self) -> "AiohttpClient":
        if self.session is None:
            self.session = self._create_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _create_session(self) -> aiohttp.ClientSession:
        timeout_config = aiohttp.ClientTimeout(
            total=self.timeout,
            connect=10,
            sock_read=self.timeout
        )

        headers = DEFAULT_HEADERS.copy()
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        return aiohttp.ClientSession(
            timeout=timeout_config,
            headers=headers,
            raise_for_status=False  # Handle status codes manually
        )

    async def get(self, url: str) -> HttpResponse:
        if self.session is None:
            self.session = self._create_session()

        async with self.session.get(url, allow_redirects=True) as response:
            body = await response.text(encoding="utf-8", errors="ignore")
            return HttpResponse(status_code=response.status, body=body)

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None


class Publisher:
    """Writes generated documents and notifies search engines."""

    def __init__(
        self,
        writer: SitemapWriter,
        base_path: str,
        file_writer: FileWriter,
        http_client: HttpClient,
        search_engines: List[str]
    ):
        self.writer = writer
        self.base_path = base_path
        self.file_writer = file_writer
        self.http_client = http_client
        self.search_engines = search_engines

    def _target_path(self, file_name: str) -> str:
        return os.path.join(self.base_path, file_name)

    def write(self, include_robots: bool = False) -> List[str]:
        """
        Write the sitemap index (if built) and every generated sitemap.

        Returns:
            List of written file paths, index first

        Raises:
            NothingToWriteError: if nothing has been generated yet
        """
        index = self.writer.sitemap_index
        sitemaps = list(self.writer.sitemaps.values())

        if index is None and not sitemaps:
            raise NothingToWriteError(
                "No sitemap to write. Call create_sitemap first."
            )

        written = []
        documents = ([index] if index is not None else []) + sitemaps
        for document in documents:
            path = self._target_path(document.file_name)
            self.file_writer.write(path, document.content)
            written.append(path)
            logger.info(f"Wrote {document.file_name} to {path}")

        if include_robots:
            path = self._target_path(ROBOTS_FILE_NAME)
            self.file_writer.write(path, self.writer.create_robots_txt().encode("utf-8"))
            written.append(path)
            logger.info(f"Wrote robots.txt to {path}")

        return written

    async def notify_search_engines(self) -> List[PingResult]:
        """
        Ping every configured search engine with the public sitemap URL.

        Engines are contacted one at a time; a failing engine is reported in
        its result entry and does not stop the others.

        Raises:
            NotReadyError: if no sitemap has been generated
        """
        full_url = self.writer.sitemap_full_url
        if not full_url:
            raise NotReadyError(
                "The sitemap URL has not been set. Call create_sitemap first."
            )

        if not self.writer.sitemaps:
            raise NotReadyError(
                "No sitemap to submit. Call create_sitemap first."
            )

        escaped_url = quote(full_url, safe="")
        results = []

        for search_engine in self.search_engines:
            request_url = f"{search_engine}{escaped_url}"
            site = short_host_label(search_engine)

            try:
                response = await self.http_client.get(request_url)
                result = PingResult(
                    site=site,
                    full_site=request_url,
                    status_code=response.status_code,
                    message=html_to_text(response.body),
                )
                logger.info(f"Pinged {site}: HTTP {response.status_code}")

            except Exception as e:
                logger.error(f"Error pinging {site}: {e}")
                result = PingResult(
                    site=site,
                    full_site=request_url,
                    status_code=0,
                    error=str(e) or type(e).__name__,
                )

            results.append(result)

        return results
