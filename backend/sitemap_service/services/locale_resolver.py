"""
Locale resolution and fallback chains
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging

from sitemap_service.core.exceptions import ConfigurationError, FallbackCycle, UnknownLocale
from sitemap_service.schemas.locale import LocaleConfig
from sitemap_service.schemas.revalidation import ALL_LOCALES

logger = logging.getLogger(__name__)


class LocaleResolver:
    """
    Maps locale codes to their configuration and fallback chain

    Chains are computed and validated once, at construction, so a
    misconfigured fallback fails at startup instead of on a request.
    """

    def __init__(self, locales: Iterable[LocaleConfig], default_locale: Optional[str] = None):
        self._locales: Dict[str, LocaleConfig] = {}
        for locale in locales:
            if locale.code in self._locales:
                raise ConfigurationError(f"Duplicate locale code: {locale.code!r}")
            self._locales[locale.code] = locale

        if not self._locales:
            raise ConfigurationError("At least one locale must be configured")

        if default_locale is None:
            default_locale = next(iter(self._locales))
        elif default_locale not in self._locales:
            raise ConfigurationError(f"Default locale {default_locale!r} is not configured")
        self.default_locale = default_locale

        self._chains: Dict[str, Tuple[LocaleConfig, ...]] = {}
        self._dependents: Dict[str, Tuple[str, ...]] = {}
        self.validate()

    @property
    def locales(self) -> List[str]:
        """Configured locale codes, in configuration order"""
        return list(self._locales)

    def resolve(self, locale: str) -> LocaleConfig:
        try:
            return self._locales[locale]
        except KeyError:
            raise UnknownLocale(locale) from None

    def fallback_chain(self, locale: str) -> Tuple[LocaleConfig, ...]:
        """
        Locales to try, in order, starting with the locale itself

        Raises:
            UnknownLocale: locale is not configured
        """
        self.resolve(locale)
        return self._chains[locale]

    def dependents(self, locale: str) -> Tuple[str, ...]:
        """Locales that fall back, directly or transitively, to this one"""
        self.resolve(locale)
        return self._dependents[locale]

    def expand(self, locale: str) -> List[str]:
        """Resolve '*' to every locale, otherwise validate the single code"""
        if locale == ALL_LOCALES:
            return self.locales
        return [self.resolve(locale).code]

    def validate(self) -> None:
        """
        Compute the fallback chain of every locale

        Raises:
            ConfigurationError: a fallback points at an unconfigured locale
            FallbackCycle: following fallbacks revisits a locale
        """
        chains = {}
        for code in self._locales:
            chains[code] = self._walk(code)
        self._chains = chains
        self._dependents = {
            code: tuple(other for other, chain in chains.items() if any(c.code == code for c in chain[1:]))
            for code in chains
        }
        logger.debug(f"Validated fallback chains for {len(chains)} locales")

    def _walk(self, code: str) -> Tuple[LocaleConfig, ...]:
        chain: List[LocaleConfig] = []
        seen = set()
        current: Optional[str] = code
        while current is not None:
            if current in seen:
                raise FallbackCycle([c.code for c in chain] + [current])
            config = self._locales.get(current)
            if config is None:
                raise ConfigurationError(
                    f"Locale {chain[-1].code!r} falls back to unconfigured locale {current!r}"
                )
            seen.add(current)
            chain.append(config)
            current = config.fallback_locale
        return tuple(chain)
