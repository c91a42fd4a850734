"""
Celery configuration for thrift-studio
"""
import os
import sys
import logging
from celery import Celery
from celery.schedules import crontab
from django.conf import settings

# Set default Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'thrift_studio.settings')

# Create Celery app
app = Celery('thrift_studio')

# Load config from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

logger = logging.getLogger(__name__)

# Windows compatibility: Use 'solo' pool on Windows (prefork doesn't work on Windows)
if sys.platform == 'win32':
    app.conf.worker_pool = 'solo'
    logger.info("[CELERY CONFIG] Using 'solo' pool for Windows compatibility")

broker_url = getattr(settings, 'CELERY_BROKER_URL', 'redis://localhost:6379/0')
app.conf.broker_url = broker_url
logger.info("[CELERY CONFIG] Broker URL: %s", broker_url)

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()

result_backend = getattr(settings, 'CELERY_RESULT_BACKEND', 'django-db')
app.conf.result_backend = result_backend
app.conf.result_extended = True
app.conf.broker_connection_retry_on_startup = True
logger.info("[CELERY CONFIG] Result backend: %s", result_backend)

# Task serialization
app.conf.task_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.result_serializer = 'json'

app.conf.timezone = 'UTC'
app.conf.enable_utc = True

app.conf.task_track_started = True
app.conf.task_send_sent_event = True

# A try-on that was already submitted to the provider must not be replayed
# on worker loss, otherwise the model metrics are counted twice.
app.conf.task_acks_late = False

if sys.platform != 'win32':
    app.conf.worker_prefetch_multiplier = 1
    app.conf.worker_max_tasks_per_child = 50

# Task time limits. Polling alone can take up to TRYON_CONFIG['timeout_seconds'].
app.conf.task_time_limit = 300
app.conf.task_soft_time_limit = 240

# Periodic decay of the recent-usage window on fashion models
app.conf.beat_schedule = {
    'refresh-fashion-model-recent-usage': {
        'task': 'fashion_models.tasks.refresh_recent_usage_async',
        'schedule': crontab(minute=15, hour='*/6'),
    },
}
