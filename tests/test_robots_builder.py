"""Tests for robots.txt policies."""

import pytest

from sitemap_service.core.exceptions import UnknownLocale
from sitemap_service.schemas.site import RobotsRules
from sitemap_service.services.engine import build_engine

from conftest import make_site_config


class TestBuild:
    def test_policy_points_at_locale_sitemap(self, engine) -> None:
        policy = engine.robots_builder.build("hi")
        assert policy.locale == "hi"
        assert policy.sitemap_url == "https://academy.com/hi/sitemap.xml"
        assert policy.disallowed_paths == frozenset({"/api/", "/admin/"})
        assert policy.allow_all

    def test_paths_are_rooted(self) -> None:
        engine = build_engine(make_site_config(robots=RobotsRules(disallow=["private", " ", "/tmp"])))
        assert engine.robots_builder.build("en").disallowed_paths == frozenset({"/private", "/tmp"})

    def test_paths_are_host_absolute_not_locale_scoped(self, engine) -> None:
        assert engine.resolver.resolve("hi").base_path == "/hi"
        policy = engine.robots_builder.build("hi")
        assert "/api/" in policy.disallowed_paths
        assert "/hi/api/" not in policy.disallowed_paths

    def test_unknown_locale(self, engine) -> None:
        with pytest.raises(UnknownLocale):
            engine.robots_builder.build("fr")

    def test_build_does_not_fetch_content(self, engine, source) -> None:
        engine.robots_builder.build("en")
        assert source.calls["en"] == 0


class TestSerialize:
    def test_directives(self, engine) -> None:
        text = engine.robots_builder.serialize(engine.robots_builder.build("en"))
        assert text == (
            "User-agent: *\n"
            "Disallow: /admin/\n"
            "Disallow: /api/\n"
            "\n"
            "Sitemap: https://academy.com/en/sitemap.xml\n"
        )

    def test_nothing_blocked(self) -> None:
        engine = build_engine(make_site_config(robots=RobotsRules()))
        text = engine.robots_builder.serialize(engine.robots_builder.build("en"))
        assert text.splitlines()[:2] == ["User-agent: *", "Disallow:"]

    def test_allow_all_false_blocks_everything(self) -> None:
        engine = build_engine(make_site_config(
            robots=RobotsRules(user_agent="Googlebot", allow_all=False, disallow=["/api/"])
        ))
        text = engine.robots_builder.serialize(engine.robots_builder.build("en"))
        assert text.splitlines()[:2] == ["User-agent: Googlebot", "Disallow: /"]
        assert "Disallow: /api/" not in text

    def test_combined_lists_every_sitemap(self, engine) -> None:
        policies = [engine.robots_builder.build(code) for code in engine.resolver.locales]
        text = engine.robots_builder.serialize_combined(policies)
        assert text.count("Disallow: /api/") == 1
        assert "Sitemap: https://academy.com/en/sitemap.xml" in text
        assert "Sitemap: https://academy.com/hi/sitemap.xml" in text

    def test_serialization_is_stable(self, engine) -> None:
        builder = engine.robots_builder
        assert builder.serialize(builder.build("en")) == builder.serialize(builder.build("en"))
