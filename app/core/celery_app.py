from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

from app.config.settings import settings

celery_app = Celery("media_library",
                    broker=settings.REDIS_URL,
                    backend=settings.REDIS_URL)

task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('maintenance', Exchange('maintenance'), routing_key='maintenance'),
)

task_routes = {
    'cleanup_orphaned_files': {'queue': 'maintenance'},
}

beat_schedule = {
    'cleanup-orphaned-files-daily': {
        'task': 'cleanup_orphaned_files',
        'schedule': crontab(hour=0, minute=0),
    },
}

celery_app.autodiscover_tasks(['app.tasks'], related_name='maintenance')

celery_app.conf.update(
    task_queues=task_queues,
    task_default_queue='default',
    task_routes=task_routes,
    beat_schedule=beat_schedule,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=3600,
    task_soft_time_limit=3000,
    broker_connection_timeout=30,
    broker_connection_max_retries=5,
)
