"""Tests for locale resolution and fallback chains."""

import pytest
from pydantic import ValidationError

from sitemap_service.core.exceptions import ConfigurationError, FallbackCycle, UnknownLocale
from sitemap_service.schemas import LocaleConfig
from sitemap_service.services.locale_resolver import LocaleResolver


def locales(*specs):
    return [
        LocaleConfig(code=code, canonical_base=f"https://example.com/{code}", fallback_locale=fallback)
        for code, fallback in specs
    ]


class TestResolve:
    def test_resolves_configured_locale(self) -> None:
        resolver = LocaleResolver(locales(("en", None), ("hi", "en")))
        config = resolver.resolve("hi")
        assert config.code == "hi"
        assert config.canonical_base == "https://example.com/hi"

    def test_unknown_locale_raises(self) -> None:
        resolver = LocaleResolver(locales(("en", None)))
        with pytest.raises(UnknownLocale) as exc_info:
            resolver.resolve("fr")
        assert exc_info.value.locale == "fr"

    def test_default_locale_is_first_configured(self) -> None:
        resolver = LocaleResolver(locales(("de", None), ("en", None)))
        assert resolver.default_locale == "de"
        assert resolver.locales == ["de", "en"]

    def test_explicit_default_must_be_configured(self) -> None:
        with pytest.raises(ConfigurationError):
            LocaleResolver(locales(("en", None)), default_locale="fr")

    def test_expand_wildcard_and_single(self) -> None:
        resolver = LocaleResolver(locales(("en", None), ("hi", "en")))
        assert resolver.expand("*") == ["en", "hi"]
        assert resolver.expand("hi") == ["hi"]
        with pytest.raises(UnknownLocale):
            resolver.expand("fr")


class TestFallbackChain:
    def test_chain_starts_with_locale_and_follows_fallbacks(self) -> None:
        resolver = LocaleResolver(locales(("en", None), ("hi", "en"), ("mr", "hi")))
        assert [c.code for c in resolver.fallback_chain("mr")] == ["mr", "hi", "en"]
        assert [c.code for c in resolver.fallback_chain("en")] == ["en"]

    def test_every_chain_terminates_without_repeats(self) -> None:
        resolver = LocaleResolver(locales(
            ("en", None), ("de", "en"), ("at", "de"), ("ch", "de"), ("fr", None), ("be", "fr"),
        ))
        for code in resolver.locales:
            chain = [c.code for c in resolver.fallback_chain(code)]
            assert chain[0] == code
            assert len(chain) == len(set(chain))
            assert resolver.resolve(chain[-1]).fallback_locale is None

    def test_cycle_is_detected_at_construction(self) -> None:
        with pytest.raises(FallbackCycle) as exc_info:
            LocaleResolver(locales(("en", "hi"), ("hi", "en")))
        assert exc_info.value.chain[0] == exc_info.value.chain[-1]

    def test_self_reference_is_a_cycle(self) -> None:
        with pytest.raises(FallbackCycle):
            LocaleResolver(locales(("en", "en")))

    def test_cycle_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            LocaleResolver(locales(("a", "b"), ("b", "c"), ("c", "a")))

    def test_fallback_to_unconfigured_locale(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            LocaleResolver(locales(("hi", "en")))
        assert not isinstance(exc_info.value, FallbackCycle)

    def test_duplicate_codes_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            LocaleResolver(locales(("en", None), ("en", None)))

    def test_unknown_locale_chain_raises(self) -> None:
        resolver = LocaleResolver(locales(("en", None)))
        with pytest.raises(UnknownLocale):
            resolver.fallback_chain("xx")


class TestLocaleConfig:
    def test_trailing_slash_is_dropped(self) -> None:
        config = LocaleConfig(code="en", canonical_base="https://academy.com/en/")
        assert config.canonical_base == "https://academy.com/en"
        assert config.base_path == "/en"

    @pytest.mark.parametrize("base", ["academy.com/en", "ftp://academy.com", "https://academy.com/en?x=1"])
    def test_invalid_canonical_base(self, base) -> None:
        with pytest.raises(ValidationError):
            LocaleConfig(code="en", canonical_base=base)

    def test_wildcard_is_not_a_locale_code(self) -> None:
        with pytest.raises(ValidationError):
            LocaleConfig(code="*", canonical_base="https://academy.com")
