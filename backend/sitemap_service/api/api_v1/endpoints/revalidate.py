"""
Revalidation webhook endpoints
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from typing import Optional
import logging
import secrets

from sitemap_service.api.deps import get_engine, get_settings
from sitemap_service.schemas.revalidation import (
    ALL_LOCALES, CoordinatorStatus, RevalidationAck, RevalidationRequest, utcnow
)
from sitemap_service.services.engine import SitemapEngine

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_token(settings=Depends(get_settings),
                 x_revalidate_token: Optional[str] = Header(None)) -> None:
    """
    Require the shared secret when REVALIDATION_SECRET is configured
    """
    secret = settings.REVALIDATION_SECRET
    if not secret:
        return
    if x_revalidate_token is None or not secrets.compare_digest(x_revalidate_token, secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid revalidation token")


@router.post(
    "/revalidate",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=RevalidationAck,
    dependencies=[Depends(verify_token)],
)
async def revalidate(payload: Optional[RevalidationRequest] = None,
                     locale: Optional[str] = Query(None, description="Overrides the body locale"),
                     engine: SitemapEngine = Depends(get_engine)):
    """
    Enqueue regeneration of a locale ('*' for all locales)

    Returns as soon as the event is queued; the rebuild runs in the
    background.
    """
    target = locale or (payload.locale if payload is not None else ALL_LOCALES)
    try:
        locales = engine.coordinator.submit(target)
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    logger.info(f"Revalidation requested for {target}: {', '.join(locales)}")
    return RevalidationAck(locales=locales, requested_at=utcnow())


@router.get("/revalidate/status", response_model=CoordinatorStatus)
async def revalidation_status(engine: SitemapEngine = Depends(get_engine)):
    """
    Per-locale revalidation state and published versions
    """
    return engine.coordinator.status()
