"""
Exception hierarchy for the sitemap engine

Configuration errors surface at load time; content source errors are
absorbed inside the route registry and never reach read callers.
"""


class SitemapEngineError(Exception):
    """Base for all sitemap engine errors"""
    pass


class ConfigurationError(SitemapEngineError):
    """Site or locale configuration is invalid"""
    pass


class FallbackCycle(ConfigurationError):
    """Following fallback_locale links loops back on itself"""

    def __init__(self, chain):
        self.chain = list(chain)
        super().__init__(f"Locale fallback cycle: {' -> '.join(self.chain)}")


class UnknownLocale(SitemapEngineError):
    """Requested locale is not configured"""

    def __init__(self, locale: str):
        self.locale = locale
        super().__init__(f"Unknown locale: {locale!r}")


class SourceUnavailable(SitemapEngineError):
    """Content source could not deliver dynamic routes"""
    pass


class MalformedEntry(SitemapEngineError):
    """A single route entry from upstream is unusable as-is"""
    pass
