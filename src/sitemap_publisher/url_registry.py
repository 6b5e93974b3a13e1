"""URL registry holding the validated entries of one sitemap run."""

import logging
from datetime import datetime
from decimal import Decimal, DecimalException
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from lxml import etree
from .config import ALLOWED_PRIORITIES, URL_LENGTH
from .errors import InvalidInputError
from .types import ChangeFrequency, UrlInput, UrlRecord
from .utils import format_number, format_timestamp, get_current_timestamp

logger = logging.getLogger(__name__)


def canonical_priority(priority: Any) -> str:
    """
    Reduce a priority value to its canonical string form.

    ``1``, ``1.0`` and ``"1.0"`` all become ``"1"``; ``0.50`` becomes
    ``"0.5"``. Values that cannot be read as a decimal are returned as
    their plain string so validation can report them.
    """
    if isinstance(priority, bool) or priority is None:
        return str(priority)

    try:
        value = Decimal(str(priority).strip()).normalize()
    except DecimalException:
        return str(priority)

    return format(value, "f")


def check_xml_text(name: str, value: str) -> None:
    """Raise InvalidInputError if lxml cannot store ``value`` as element text."""
    try:
        etree.Element(name).text = value
    except ValueError as e:
        raise InvalidInputError(f"The provided {name} contains characters not allowed in XML: {e}")


def canonical_change_frequency(change_frequency: Any) -> str:
    """Return the plain string value of a change frequency."""
    if isinstance(change_frequency, ChangeFrequency):
        return change_frequency.value
    return str(change_frequency)


class UrlRegistry:
    """Ordered, validated collection of URL records."""

    def __init__(self):
        self._urls: List[UrlRecord] = []

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[UrlRecord]:
        return iter(self._urls)

    @property
    def urls(self) -> Tuple[UrlRecord, ...]:
        """Snapshot of the registered records in insertion order."""
        return tuple(self._urls)

    def add_url(
        self,
        location: str,
        priority: Any,
        change_frequency: Union[str, ChangeFrequency],
        last_modified: Optional[Union[str, datetime]] = None
    ) -> UrlRecord:
        """
        Validate and append a URL record.

        Args:
            location: Absolute URL of the page
            priority: One of ``1, 0.9, ... 0.1`` as a string or number
            change_frequency: One of the sitemaps.org frequency values
            last_modified: ISO-8601 string or datetime; defaults to now

        Returns:
            The stored UrlRecord

        Raises:
            InvalidInputError: if the frequency or priority is not allowed,
                or the location or lastmod is not valid XML text
        """
        frequency = canonical_change_frequency(change_frequency)
        if frequency not in ChangeFrequency.values():
            raise InvalidInputError(
                f"The provided change frequency of {frequency} is not an allowed "
                f"frequency. Must be one of {', '.join(ChangeFrequency.values())}"
            )

        canonical = canonical_priority(priority)
        if canonical not in ALLOWED_PRIORITIES:
            raise InvalidInputError(
                f"The provided priority of {priority} is not an allowed priority. "
                f"Must be one of {', '.join(ALLOWED_PRIORITIES)}"
            )

        if not isinstance(location, str) or not location:
            raise InvalidInputError(f"URL location must be a non-empty string, got {location!r}")
        check_xml_text("loc", location)

        if len(location) > URL_LENGTH:
            logger.warning(
                f"URL exceeds {URL_LENGTH} characters ({len(location)}): {location[:80]}..."
            )

        if last_modified is None:
            lastmod = get_current_timestamp()
        elif isinstance(last_modified, datetime):
            lastmod = format_timestamp(last_modified)
        else:
            lastmod = str(last_modified)
            check_xml_text("lastmod", lastmod)

        record = UrlRecord(
            location=location,
            priority=canonical,
            change_frequency=frequency,
            last_modified=lastmod,
        )
        self._urls.append(record)
        logger.debug(f"Added URL: {location} (priority: {canonical}, changefreq: {frequency})")
        return record

    def add_urls(self, items: Iterable[Union[UrlInput, Mapping[str, Any]]]) -> int:
        """
        Add a batch of URLs.

        Items are processed in order; each one is shape-checked and then
        passed to ``add_url``. Items before the first invalid one remain
        registered when an error is raised.

        Returns:
            Number of URLs added
        """
        added = 0
        for item in items:
            url_input = item if isinstance(item, UrlInput) else UrlInput.from_mapping(item)
            self.add_url(
                url_input.url,
                url_input.priority,
                url_input.change_frequency,
                url_input.last_modified,
            )
            added += 1

        logger.info(f"Added {format_number(added)} URLs to registry")
        return added

    def clear(self) -> None:
        """Remove all registered URLs."""
        self._urls.clear()
