"""
Routers of the service
"""

from fastapi import APIRouter

from sitemap_service.api.api_v1.endpoints import revalidate, robots, sitemaps

# Management API, mounted under /api/v1
api_router = APIRouter()
api_router.include_router(revalidate.router, tags=["revalidation"])

# Public documents, mounted at the site root
documents_router = APIRouter()
documents_router.include_router(sitemaps.router, tags=["sitemaps"])
documents_router.include_router(robots.router, tags=["robots"])
