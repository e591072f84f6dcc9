"""
Background tasks that trigger revalidation on a schedule
"""

import logging
from typing import Any, Dict, Optional

import httpx
from celery import shared_task

from sitemap_service.core.config import settings

logger = logging.getLogger(__name__)


def post_revalidation(locale: str = "*", service_url: Optional[str] = None,
                      secret: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None,
                      timeout: float = 30) -> Dict[str, Any]:
    """
    Call the service's revalidation webhook

    Args:
        locale: Locale code or '*' for all locales
        service_url: Base URL of the service, SERVICE_URL by default
        secret: Shared revalidation secret, REVALIDATION_SECRET by default
        transport: Optional httpx transport, used by tests

    Returns:
        The acknowledgement returned by the service

    Raises:
        httpx.HTTPError: the request failed or was rejected
    """
    base_url = (service_url or settings.SERVICE_URL).rstrip("/")
    secret = secret if secret is not None else settings.REVALIDATION_SECRET
    headers = {"X-Revalidate-Token": secret} if secret else {}

    with httpx.Client(timeout=timeout, transport=transport) as client:
        response = client.post(f"{base_url}/api/v1/revalidate", json={"locale": locale}, headers=headers)
        response.raise_for_status()
        ack = response.json()

    logger.info(f"Scheduled revalidation accepted for {', '.join(ack.get('locales', []))}")
    return ack


@shared_task(bind=True, max_retries=3)
def revalidate_locales(self, locale: str = "*") -> Dict[str, Any]:
    """
    Periodic revalidation so content changes without a webhook still
    reach the sitemaps
    """
    try:
        return post_revalidation(locale)
    except httpx.HTTPError as e:
        logger.error(f"Scheduled revalidation of {locale} failed: {e}")
        # Retry with exponential backoff
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))
