"""Tests for the HTTP surface: documents, conditional requests and the webhook."""

import time
import xml.etree.ElementTree as ET

import pytest
from fastapi.testclient import TestClient

from sitemap_service.core.config import Settings
from sitemap_service.main import create_app
from sitemap_service.services.sitemap_builder import SITEMAP_NS

from conftest import FakeContentSource, make_site_config, route

NS = {"sm": SITEMAP_NS}


def make_settings(**overrides) -> Settings:
    values = dict(
        WARM_ON_STARTUP=False,
        REVALIDATION_DEBOUNCE_SECONDS=0.0,
        CONTENT_SOURCE_TIMEOUT=1.0,
        REVALIDATION_SECRET=None,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def content():
    return FakeContentSource({"en": [route("blog/upsc-2025")]})


@pytest.fixture
def client(content):
    app = create_app(settings=make_settings(), site_config=make_site_config(), content_source=content)
    with TestClient(app) as test_client:
        yield test_client


def wait_for_version(client: TestClient, locale: str, version: int) -> dict:
    for _ in range(200):
        status = client.get("/api/v1/revalidate/status").json()["locales"][locale]
        if status["version"] >= version and status["state"] == "idle":
            return status
        time.sleep(0.01)
    raise AssertionError(f"{locale} never reached version {version}")


def locs(body: bytes) -> list:
    return [el.text for el in ET.fromstring(body).iter(f"{{{SITEMAP_NS}}}loc")]


class TestSitemapEndpoints:
    def test_locale_sitemap(self, client) -> None:
        response = client.get("/en/sitemap.xml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert "https://academy.com/en/blog/upsc-2025" in locs(response.content)
        assert response.headers["ETag"].startswith('"')

    def test_not_modified_when_etag_matches(self, client) -> None:
        etag = client.get("/en/sitemap.xml").headers["ETag"]
        response = client.get("/en/sitemap.xml", headers={"If-None-Match": etag})
        assert response.status_code == 304
        assert response.content == b""

        stale = client.get("/en/sitemap.xml", headers={"If-None-Match": '"stale"'})
        assert stale.status_code == 200

    def test_first_read_builds_once(self, client, content) -> None:
        client.get("/hi/sitemap.xml")
        client.get("/hi/sitemap.xml")
        assert content.calls["hi"] == 1

    def test_unknown_locale_is_404(self, client) -> None:
        assert client.get("/fr/sitemap.xml").status_code == 404
        assert client.get("/fr/robots.txt").status_code == 404

    def test_index_lists_locale_sitemaps(self, client) -> None:
        client.get("/en/sitemap.xml")
        response = client.get("/sitemap.xml")
        assert response.status_code == 200
        root = ET.fromstring(response.content)
        assert root.tag == f"{{{SITEMAP_NS}}}sitemapindex"
        assert locs(response.content) == [
            "https://academy.com/en/sitemap.xml",
            "https://academy.com/hi/sitemap.xml",
        ]


class TestRobotsEndpoints:
    def test_locale_robots(self, client) -> None:
        response = client.get("/hi/robots.txt")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "Sitemap: https://academy.com/hi/sitemap.xml" in response.text
        assert "Disallow: /api/" in response.text

        again = client.get("/hi/robots.txt", headers={"If-None-Match": response.headers["ETag"]})
        assert again.status_code == 304

    def test_combined_robots(self, client) -> None:
        response = client.get("/robots.txt")
        assert response.status_code == 200
        assert "Sitemap: https://academy.com/en/sitemap.xml" in response.text
        assert "Sitemap: https://academy.com/hi/sitemap.xml" in response.text


class TestRevalidateWebhook:
    def test_accepts_locale(self, client) -> None:
        response = client.post("/api/v1/revalidate", json={"locale": "en"})
        assert response.status_code == 202
        body = response.json()
        assert body["status"] == "accepted"
        assert body["locales"] == ["en"]

    def test_wildcard_and_empty_body(self, client) -> None:
        response = client.post("/api/v1/revalidate")
        assert response.status_code == 202
        assert response.json()["locales"] == ["en", "hi"]

    def test_query_overrides_body(self, client) -> None:
        response = client.post("/api/v1/revalidate?locale=hi", json={"locale": "en"})
        assert response.json()["locales"] == ["hi"]

    def test_unknown_locale_is_404(self, client) -> None:
        assert client.post("/api/v1/revalidate", json={"locale": "fr"}).status_code == 404

    def test_content_change_is_published(self, client, content) -> None:
        before = client.get("/en/sitemap.xml")
        content.routes["en"].append(route("blog/new-batch"))

        assert client.post("/api/v1/revalidate", json={"locale": "en"}).status_code == 202
        status = wait_for_version(client, "en", 2)
        assert status["rebuilds"] == 2

        after = client.get("/en/sitemap.xml", headers={"If-None-Match": before.headers["ETag"]})
        assert after.status_code == 200
        assert "https://academy.com/en/blog/new-batch" in locs(after.content)

    def test_fallback_change_reaches_dependent_locale(self, client, content) -> None:
        client.get("/hi/sitemap.xml")
        content.routes["en"].append(route("blog/new-batch"))

        assert client.post("/api/v1/revalidate", json={"locale": "en"}).status_code == 202
        wait_for_version(client, "en", 1)
        wait_for_version(client, "hi", 2)

        hi = client.get("/hi/sitemap.xml")
        assert "https://academy.com/hi/blog/new-batch" in locs(hi.content)

    def test_status_reports_every_locale(self, client) -> None:
        body = client.get("/api/v1/revalidate/status").json()
        assert set(body["locales"]) == {"en", "hi"}
        assert body["locales"]["en"]["state"] == "idle"
        assert body["locales"]["en"]["version"] == 0


class TestRevalidationSecret:
    @pytest.fixture
    def secured(self, content):
        app = create_app(
            settings=make_settings(REVALIDATION_SECRET="s3cret"),
            site_config=make_site_config(),
            content_source=content,
        )
        with TestClient(app) as test_client:
            yield test_client

    def test_missing_token_is_rejected(self, secured) -> None:
        assert secured.post("/api/v1/revalidate", json={"locale": "en"}).status_code == 401

    def test_wrong_token_is_rejected(self, secured) -> None:
        response = secured.post("/api/v1/revalidate", json={"locale": "en"},
                                headers={"X-Revalidate-Token": "guess"})
        assert response.status_code == 401

    def test_valid_token_is_accepted(self, secured) -> None:
        response = secured.post("/api/v1/revalidate", json={"locale": "en"},
                                headers={"X-Revalidate-Token": "s3cret"})
        assert response.status_code == 202


class TestLifecycle:
    def test_health(self, client) -> None:
        body = client.get("/health").json()
        assert body["status"] == "healthy"

    def test_warm_on_startup_publishes_every_locale(self, content) -> None:
        app = create_app(
            settings=make_settings(WARM_ON_STARTUP=True),
            site_config=make_site_config(),
            content_source=content,
        )
        with TestClient(app) as test_client:
            wait_for_version(test_client, "en", 1)
            wait_for_version(test_client, "hi", 1)
            hi_sitemap = test_client.get("/hi/sitemap.xml")
        assert "https://academy.com/hi/blog/upsc-2025" in locs(hi_sitemap.content)
        assert content.calls["en"] >= 1

    def test_not_ready_outside_lifespan(self) -> None:
        app = create_app(settings=make_settings(), site_config=make_site_config(),
                         content_source=FakeContentSource())
        client = TestClient(app)
        assert client.get("/en/sitemap.xml").status_code == 503
