class RSSPagesError(Exception):
    """Base class for errors raised by rss_pages."""


class RSSFetchError(RSSPagesError):
    """Raised when an RSS/Atom feed cannot be fetched or parsed."""


class ParseError(RSSPagesError):
    """Raised when a feed entry cannot be parsed into expected fields."""


class ImageError(RSSPagesError):
    """Raised when a source image cannot be downloaded or transcoded."""


class StoreError(RSSPagesError):
    """Raised when the article store snapshot cannot be read."""


class ConfigError(RSSPagesError):
    """Raised when a configuration value is invalid."""
