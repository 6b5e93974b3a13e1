"""Exceptions raised by the sitemap publisher."""


class SitemapError(Exception):
    """Base class for all sitemap publisher errors."""


class InvalidInputError(SitemapError, ValueError):
    """A URL entry or batch item failed validation."""


class EmptyInputError(SitemapError):
    """There are no URLs to render."""


class TooManyUrlsError(SitemapError):
    """The registry holds more URLs than a single sitemap may contain."""


class SitemapTooLargeError(SitemapError):
    """A rendered sitemap exceeds the byte-size ceiling."""


class NothingToWriteError(SitemapError):
    """Neither a sitemap nor an index has been generated yet."""


class NotReadyError(SitemapError):
    """A prerequisite generation step has not been run."""
