# catalyst/celery_worker.py
from celery import Celery

from catalyst.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CELERY_TASK_ALWAYS_EAGER

celery_app = Celery(
    "catalyst",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# register task modules explicitly
celery_app.conf.imports = ("catalyst.services.notification_service",)

celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.timezone = "UTC"
