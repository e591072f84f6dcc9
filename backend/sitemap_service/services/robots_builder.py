"""
Robots policy generation per locale
"""

import logging
from typing import Iterable, List

from sitemap_service.schemas.documents import RobotsPolicy
from sitemap_service.schemas.site import RobotsRules
from sitemap_service.services.locale_resolver import LocaleResolver
from sitemap_service.services.sitemap_builder import SitemapBuilder

logger = logging.getLogger(__name__)


def _normalize_disallow(path: str) -> str:
    path = path.strip()
    return path if path.startswith("/") else f"/{path}"


class RobotsPolicyBuilder:
    """
    Builds robots.txt policies

    A pure function of configuration plus the locale's sitemap URL; it
    never touches dynamic content.

    Disallow paths are host-absolute and are not prefixed with the
    locale's base path: crawlers match robots.txt rules from the root of
    the host, and the service's own /api/ and /admin/ live there for every
    locale. A locale that needs its own rules lists them with the full
    path, e.g. "/hi/drafts/".
    """

    def __init__(self, resolver: LocaleResolver, sitemap_builder: SitemapBuilder, rules: RobotsRules):
        self.resolver = resolver
        self.sitemap_builder = sitemap_builder
        self.rules = rules

    def build(self, locale: str) -> RobotsPolicy:
        """
        Raises:
            UnknownLocale: locale is not configured
        """
        self.resolver.resolve(locale)
        return RobotsPolicy(
            locale=locale,
            allow_all=self.rules.allow_all,
            disallowed_paths=frozenset(_normalize_disallow(p) for p in self.rules.disallow if p.strip()),
            sitemap_url=self.sitemap_builder.sitemap_url(locale),
            user_agent=self.rules.user_agent,
        )

    def serialize(self, policy: RobotsPolicy) -> str:
        lines = [f"User-agent: {policy.user_agent}"]
        lines.extend(self._disallow_lines(policy.allow_all, policy.disallowed_paths))
        lines.append("")
        lines.append(f"Sitemap: {policy.sitemap_url}")
        return "\n".join(lines) + "\n"

    def serialize_combined(self, policies: Iterable[RobotsPolicy]) -> str:
        """One robots.txt for a host serving several locales"""
        policies = list(policies)
        if not policies:
            return f"User-agent: {self.rules.user_agent}\nDisallow:\n"

        disallowed = set()
        for policy in policies:
            disallowed.update(policy.disallowed_paths)
        allow_all = all(policy.allow_all for policy in policies)

        lines = [f"User-agent: {policies[0].user_agent}"]
        lines.extend(self._disallow_lines(allow_all, disallowed))
        lines.append("")
        lines.extend(f"Sitemap: {policy.sitemap_url}" for policy in policies)
        return "\n".join(lines) + "\n"

    def _disallow_lines(self, allow_all: bool, paths) -> List[str]:
        if not allow_all:
            return ["Disallow: /"]
        if not paths:
            return ["Disallow:"]
        return [f"Disallow: {path}" for path in sorted(paths)]
