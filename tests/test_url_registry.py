"""Tests for URL registry functionality."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
import pytest
from sitemap_publisher.config import ALLOWED_PRIORITIES, DEFAULT_PRIORITY, URL_LENGTH
from sitemap_publisher.errors import InvalidInputError
from sitemap_publisher.types import ChangeFrequency, UrlInput
from sitemap_publisher.url_registry import UrlRegistry, canonical_priority


@pytest.fixture
def registry():
    """Create an empty URL registry."""
    return UrlRegistry()


@pytest.mark.parametrize("priority", ALLOWED_PRIORITIES)
@pytest.mark.parametrize("frequency", ChangeFrequency.values())
def test_add_url_accepts_allowed_values(registry, priority, frequency):
    """Every allowed priority/frequency pair is accepted and stored verbatim."""
    record = registry.add_url("https://example.com/page", priority, frequency)

    assert len(registry) == 1
    assert record.priority == priority
    assert record.change_frequency == frequency
    assert record.location == "https://example.com/page"


@pytest.mark.parametrize("frequency", ["Daily", "fortnightly", "", None, "sometimes"])
def test_add_url_rejects_unknown_frequency(registry, frequency):
    """Unknown change frequencies are rejected without touching the registry."""
    with pytest.raises(InvalidInputError, match="change frequency"):
        registry.add_url("https://example.com/page", "0.5", frequency)

    assert len(registry) == 0


@pytest.mark.parametrize("priority", [
    "0", "0.0", "0.55", "1.1", "-0.5", "high", "", None, True, 2, "1e9999999", "sNaN",
])
def test_add_url_rejects_unknown_priority(registry, priority):
    """Priorities outside the fixed set are rejected without touching the registry."""
    with pytest.raises(InvalidInputError, match="priority"):
        registry.add_url("https://example.com/page", priority, "daily")

    assert len(registry) == 0


def test_invalid_input_is_value_error(registry):
    """InvalidInputError can be caught as ValueError."""
    with pytest.raises(ValueError):
        registry.add_url("https://example.com/page", "0.5", "often")


@pytest.mark.parametrize("value, expected", [
    (1, "1"),
    (1.0, "1"),
    ("1.0", "1"),
    (0.5, "0.5"),
    ("0.50", "0.5"),
    (Decimal("0.30"), "0.3"),
    (" 0.7 ", "0.7"),
])
def test_canonical_priority(value, expected):
    """Numeric and string priorities reduce to the same canonical string."""
    assert canonical_priority(value) == expected


def test_add_url_accepts_numeric_priority(registry):
    """Float priorities are stored in canonical string form."""
    record = registry.add_url("https://example.com/", 1.0, ChangeFrequency.WEEKLY)

    assert record.priority == "1"
    assert record.change_frequency == "weekly"


def test_add_url_defaults_last_modified(registry):
    """Omitted lastModified defaults to the current UTC time."""
    before = datetime.now(timezone.utc).replace(microsecond=0)
    record = registry.add_url("https://example.com/page", "0.5", "daily")
    after = datetime.now(timezone.utc)

    parsed = datetime.fromisoformat(record.last_modified)
    assert before <= parsed <= after
    assert record.last_modified.endswith("+00:00")


def test_add_url_keeps_given_last_modified(registry):
    """String timestamps are kept as given, datetimes are formatted."""
    first = registry.add_url("https://example.com/a", "0.5", "daily", "2024-01-02T03:04:05+00:00")
    second = registry.add_url("https://example.com/b", "0.5", "daily", datetime(2024, 1, 2, 3, 4, 5))

    assert first.last_modified == "2024-01-02T03:04:05+00:00"
    assert second.last_modified == "2024-01-02T03:04:05+00:00"


def test_add_url_rejects_missing_location(registry):
    """An empty location is rejected."""
    with pytest.raises(InvalidInputError):
        registry.add_url("", "0.5", "daily")


@pytest.mark.parametrize("location", [
    "https://example.com/a\x01",
    "https://example.com/\x00",
    "https://example.com/\ud800",
])
def test_add_url_rejects_characters_not_allowed_in_xml(registry, location):
    """Locations lxml cannot serialize are rejected at insertion."""
    registry.add_url("https://example.com/ok", "0.5", "daily")

    with pytest.raises(InvalidInputError, match="loc"):
        registry.add_url(location, "0.5", "daily")

    assert [record.location for record in registry] == ["https://example.com/ok"]


def test_add_url_rejects_last_modified_not_allowed_in_xml(registry):
    """A lastmod string with control characters is rejected."""
    with pytest.raises(InvalidInputError, match="lastmod"):
        registry.add_url("https://example.com/a", "0.5", "daily", "2024-01-01\x00")

    assert len(registry) == 0


def test_long_url_is_accepted_with_warning(registry, caplog):
    """URLs over the documented length limit are still accepted."""
    caplog.set_level(logging.WARNING)
    long_url = "https://example.com/" + "a" * URL_LENGTH

    record = registry.add_url(long_url, "0.5", "daily")

    assert record.location == long_url
    assert "exceeds" in caplog.text


def test_insertion_order_is_preserved(registry):
    """Iteration follows insertion order."""
    for i in range(5):
        registry.add_url(f"https://example.com/{i}", "0.5", "daily")

    assert [record.location for record in registry] == [
        f"https://example.com/{i}" for i in range(5)
    ]


def test_add_urls_batch(registry):
    """Batch insertion accepts mappings and UrlInput items."""
    added = registry.add_urls([
        {"url": "https://example.com/a", "changeFrequency": "daily", "priority": "0.8"},
        {"url": "https://example.com/b", "changeFrequency": "weekly",
         "lastModified": "2024-05-01T00:00:00+00:00"},
        UrlInput(url="https://example.com/c", change_frequency=ChangeFrequency.NEVER, priority=0.1),
    ])

    assert added == 3
    records = registry.urls
    assert records[0].priority == "0.8"
    assert records[1].priority == "0.5"  # default
    assert records[1].last_modified == "2024-05-01T00:00:00+00:00"
    assert records[2].change_frequency == "never"


@pytest.mark.parametrize("bad_item", [
    {"changeFrequency": "daily"},
    {"url": "https://example.com/b"},
    "https://example.com/b",
])
def test_add_urls_partial_commit_on_bad_shape(registry, bad_item):
    """Items before a malformed item stay registered; later items are not added."""
    items = [
        {"url": "https://example.com/a", "changeFrequency": "daily"},
        bad_item,
        {"url": "https://example.com/c", "changeFrequency": "daily"},
    ]

    with pytest.raises(InvalidInputError):
        registry.add_urls(items)

    assert [record.location for record in registry] == ["https://example.com/a"]


def test_url_input_default_priority():
    """Batch items without a priority get the configured default."""
    assert UrlInput(url="https://example.com/a", change_frequency="daily").priority == DEFAULT_PRIORITY
    item = UrlInput.from_mapping({"url": "https://example.com/a", "changeFrequency": "daily"})
    assert item.priority == DEFAULT_PRIORITY


def test_add_urls_partial_commit_on_bad_value(registry):
    """A bad enumeration value in a batch stops at that item."""
    items = [
        {"url": "https://example.com/a", "changeFrequency": "daily"},
        {"url": "https://example.com/b", "changeFrequency": "daily", "priority": "0.05"},
    ]

    with pytest.raises(InvalidInputError):
        registry.add_urls(items)

    assert len(registry) == 1


def test_clear(registry):
    """Clearing empties the registry."""
    registry.add_url("https://example.com/a", "0.5", "daily")
    registry.clear()

    assert len(registry) == 0
    assert registry.urls == ()
