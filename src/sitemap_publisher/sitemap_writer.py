"""Sitemap writer for rendering XML sitemaps compliant with sitemaps.org standards."""

import logging
import os
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence
from lxml import etree
from .config import (
    ALLOWED_PRIORITIES,
    CHUNKED_SITEMAP_FILE_NAME,
    CHUNKED_SITEMAP_PATTERN,
    MAX_SITEMAP_BYTES,
    MAX_URLS_PER_SITEMAP,
    SITEMAP_FILE_NAME,
    SITEMAP_INDEX_FILE_NAME,
    SITEMAP_NAMESPACE,
)
from .errors import EmptyInputError, NotReadyError, SitemapTooLargeError, TooManyUrlsError
from .types import ChangeFrequency, SitemapDocument, SitemapIndexDocument, UrlRecord
from .url_registry import UrlRegistry
from .utils import format_number, format_size, get_current_timestamp, is_valid_url

logger = logging.getLogger(__name__)


class SitemapWriter:
    """Renders the registry into sitemap and sitemap index documents."""

    def __init__(
        self,
        base_url: str,
        registry: UrlRegistry,
        max_urls_per_sitemap: int = MAX_URLS_PER_SITEMAP,
        max_sitemap_bytes: int = MAX_SITEMAP_BYTES
    ):
        self.base_url = base_url
        self.registry = registry
        self.max_urls_per_sitemap = max_urls_per_sitemap
        self.max_sitemap_bytes = max_sitemap_bytes
        self.sitemap_namespace = SITEMAP_NAMESPACE

        self.sitemaps: Dict[str, SitemapDocument] = OrderedDict()
        self.sitemap_index: Optional[SitemapIndexDocument] = None
        self.sitemap_full_url: Optional[str] = None

    def _tag(self, name: str) -> str:
        return f"{{{self.sitemap_namespace}}}{name}"

    def public_url(self, file_name: str) -> str:
        """Public URL of a generated file under the base URL."""
        return f"{self.base_url.rstrip('/')}/{file_name}"

    def create_sitemap(self) -> SitemapDocument:
        """
        Render every registered URL into ``sitemap.xml``.

        Returns:
            The generated SitemapDocument

        Raises:
            EmptyInputError: if the registry is empty
            TooManyUrlsError: if the registry exceeds the per-file cap
            SitemapTooLargeError: if the rendered document exceeds the size ceiling
        """
        urls = self.registry.urls
        if not urls:
            raise EmptyInputError("There are no URLs to process")

        if len(urls) > self.max_urls_per_sitemap:
            raise TooManyUrlsError(
                f"Too many URLs: {format_number(len(urls))} exceeds the limit of "
                f"{format_number(self.max_urls_per_sitemap)} per sitemap"
            )

        logger.info(f"Generating sitemap for {format_number(len(urls))} URLs")

        document = self._render_sitemap(urls, SITEMAP_FILE_NAME)
        self.sitemaps[SITEMAP_FILE_NAME] = document
        self.sitemap_full_url = self.public_url(SITEMAP_FILE_NAME)

        logger.info(f"Generated sitemap: {SITEMAP_FILE_NAME} ({format_size(document.size_bytes)})")
        return document

    def create_chunked_sitemaps(self) -> List[SitemapDocument]:
        """
        Render the registry into as many files as the per-file cap requires.

        Files are named ``sitemap-001.xml``, ``sitemap-002.xml`` and so on.
        Nothing is registered unless every chunk renders within the size
        ceiling. Chunk files from an earlier call are replaced, so the
        index never lists a chunk the current registry did not produce.
        """
        urls = self.registry.urls
        if not urls:
            raise EmptyInputError("There are no URLs to process")

        chunks = self._chunk_entries(urls, self.max_urls_per_sitemap)
        logger.info(
            f"Generating {len(chunks)} sitemaps for {format_number(len(urls))} URLs"
        )

        documents = [
            self._render_sitemap(chunk, CHUNKED_SITEMAP_FILE_NAME.format(i))
            for i, chunk in enumerate(chunks, 1)
        ]

        for file_name in [name for name in self.sitemaps if CHUNKED_SITEMAP_PATTERN.match(name)]:
            del self.sitemaps[file_name]
        for document in documents:
            self.sitemaps[document.file_name] = document
        self.sitemap_full_url = self.public_url(documents[0].file_name)

        logger.info(f"Generated {len(documents)} sitemap files")
        return documents

    def create_sitemap_index(self) -> SitemapIndexDocument:
        """Render ``sitemap-index.xml`` listing every generated sitemap."""
        root = etree.Element(
            self._tag("sitemapindex"),
            nsmap={None: self.sitemap_namespace}
        )

        current_time = get_current_timestamp()
        locations = []

        for file_name in self.sitemaps:
            sitemap_element = etree.SubElement(root, self._tag("sitemap"))

            location = self.public_url(file_name)
            etree.SubElement(sitemap_element, self._tag("loc")).text = location
            etree.SubElement(sitemap_element, self._tag("lastmod")).text = current_time
            locations.append(location)

        content = self._serialize(root)
        self.sitemap_index = SitemapIndexDocument(
            file_name=SITEMAP_INDEX_FILE_NAME,
            content=content,
            sitemap_locations=locations,
        )
        self.sitemap_full_url = self.public_url(SITEMAP_INDEX_FILE_NAME)

        logger.info(f"Generated sitemap index with {len(locations)} sitemaps")
        return self.sitemap_index

    def get_sitemap_string(self, file_name: str = SITEMAP_FILE_NAME) -> str:
        """Return a generated sitemap as text."""
        document = self.sitemaps.get(file_name)
        if document is None:
            raise NotReadyError(f"No sitemap named {file_name} exists. Create one first.")
        return document.content.decode("utf-8")

    def create_robots_txt(self) -> str:
        """Build robots.txt content referencing the generated files."""
        lines = ["User-agent: *", "Allow: /", ""]

        if self.sitemap_index is not None:
            lines.append(f"Sitemap: {self.public_url(self.sitemap_index.file_name)}")
        else:
            for file_name in self.sitemaps:
                lines.append(f"Sitemap: {self.public_url(file_name)}")

        return "\n".join(lines) + "\n"

    def _render_sitemap(self, urls: Sequence[UrlRecord], file_name: str) -> SitemapDocument:
        """Build and size-check one ``urlset`` document."""
        try:
            root = etree.Element(
                self._tag("urlset"),
                nsmap={None: self.sitemap_namespace}
            )

            for record in urls:
                url_element = etree.SubElement(root, self._tag("url"))
                etree.SubElement(url_element, self._tag("loc")).text = record.location
                etree.SubElement(url_element, self._tag("priority")).text = record.priority
                etree.SubElement(url_element, self._tag("changefreq")).text = record.change_frequency
                etree.SubElement(url_element, self._tag("lastmod")).text = record.last_modified

            content = self._serialize(root)

        except (ValueError, TypeError) as e:
            logger.error(f"Error rendering sitemap {file_name}: {e}")
            raise

        if len(content) > self.max_sitemap_bytes:
            raise SitemapTooLargeError(
                f"Sitemap {file_name} is {format_number(len(content))} bytes, exceeding "
                f"the limit of {format_number(self.max_sitemap_bytes)} bytes"
            )

        logger.debug(f"Rendered {file_name} with {len(urls)} URLs")
        return SitemapDocument(file_name=file_name, content=content, url_count=len(urls))

    @staticmethod
    def _serialize(root: etree._Element) -> bytes:
        return etree.tostring(
            root,
            encoding="UTF-8",
            xml_declaration=True,
            pretty_print=True
        )

    @staticmethod
    def _chunk_entries(entries: Sequence[UrlRecord], chunk_size: int) -> List[Sequence[UrlRecord]]:
        """Split entries into chunks of specified size."""
        chunks = []
        for i in range(0, len(entries), chunk_size):
            chunks.append(entries[i:i + chunk_size])
        return chunks

    def validate_sitemap(self, filepath: str) -> bool:
        """Validate a sitemap file written to disk."""
        try:
            tree = etree.parse(filepath)
            root = tree.getroot()

            if root.tag == f"{{{self.sitemap_namespace}}}sitemapindex":
                return self._validate_index(root, filepath)

            if root.tag != f"{{{self.sitemap_namespace}}}urlset":
                logger.error(f"Invalid root element in {filepath}")
                return False

            urls = root.findall(f".//{{{self.sitemap_namespace}}}url")
            if len(urls) > self.max_urls_per_sitemap:
                logger.error(f"Too many URLs in sitemap: {len(urls)}")
                return False

            if os.path.getsize(filepath) > self.max_sitemap_bytes:
                logger.error(f"Sitemap exceeds size limit: {filepath}")
                return False

            for url_elem in urls:
                loc_elem = url_elem.find(f"{{{self.sitemap_namespace}}}loc")
                if loc_elem is None or not loc_elem.text:
                    logger.error("URL missing location")
                    return False

                if not is_valid_url(loc_elem.text):
                    logger.error(f"Invalid URL format: {loc_elem.text}")
                    return False

                changefreq = url_elem.findtext(f"{{{self.sitemap_namespace}}}changefreq")
                if changefreq is not None and changefreq not in ChangeFrequency.values():
                    logger.error(f"Invalid change frequency {changefreq} for {loc_elem.text}")
                    return False

                priority = url_elem.findtext(f"{{{self.sitemap_namespace}}}priority")
                if priority is not None and priority not in ALLOWED_PRIORITIES:
                    logger.error(f"Invalid priority {priority} for {loc_elem.text}")
                    return False

            logger.info(f"Sitemap validation passed: {filepath}")
            return True

        except (OSError, etree.XMLSyntaxError) as e:
            logger.error(f"Error validating sitemap {filepath}: {e}")
            return False

    def _validate_index(self, root: etree._Element, filepath: str) -> bool:
        for sitemap_elem in root.findall(f"{{{self.sitemap_namespace}}}sitemap"):
            loc = sitemap_elem.findtext(f"{{{self.sitemap_namespace}}}loc")
            if not loc or not is_valid_url(loc):
                logger.error(f"Invalid sitemap location in index: {loc}")
                return False

        logger.info(f"Sitemap index validation passed: {filepath}")
        return True

    def get_sitemap_stats(self, filepath: str) -> dict:
        """Get statistics about a sitemap file."""
        try:
            tree = etree.parse(filepath)
            root = tree.getroot()

            urls = root.findall(f".//{{{self.sitemap_namespace}}}url")

            stats = {
                'total_urls': len(urls),
                'file_size_mb': os.path.getsize(filepath) / (1024 * 1024),
                'priority_distribution': {},
                'changefreq_distribution': {}
            }

            for url_elem in urls:
                freq = url_elem.findtext(f"{{{self.sitemap_namespace}}}changefreq")
                if freq is not None:
                    stats['changefreq_distribution'][freq] = stats['changefreq_distribution'].get(freq, 0) + 1

                priority = url_elem.findtext(f"{{{self.sitemap_namespace}}}priority")
                if priority is not None:
                    stats['priority_distribution'][priority] = stats['priority_distribution'].get(priority, 0) + 1

            return stats

        except (OSError, etree.XMLSyntaxError) as e:
            logger.error(f"Error getting sitemap stats for {filepath}: {e}")
            return {}
