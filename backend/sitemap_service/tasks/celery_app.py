"""
Celery application configuration for scheduled revalidation
"""

from celery import Celery

from sitemap_service.core.config import settings

# Create Celery app instance
celery_app = Celery(
    'sitemap_service',
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=['sitemap_service.tasks.revalidation_tasks'],
)

# Load configuration
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,  # 5 minutes hard limit
    task_soft_time_limit=4 * 60,  # 4 minutes soft limit
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    'revalidate-all-locales': {
        'task': 'sitemap_service.tasks.revalidation_tasks.revalidate_locales',
        'schedule': settings.SCHEDULED_REVALIDATION_MINUTES * 60.0,  # seconds
        'args': ('*',),
    },
}
