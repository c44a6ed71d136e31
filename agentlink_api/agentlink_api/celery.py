import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'agentlink_api.settings')

app = Celery('agentlink_api')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
