import os

import sentry_sdk
from celery import Celery
from sentry_sdk.integrations.celery import CeleryIntegration

from mangasync.version import get_mangasync_version

SENTRY_BACKEND_DSN = os.environ.get("SENTRY_BACKEND_DSN", None)

if SENTRY_BACKEND_DSN:
    MANGASYNC_ENVIRONMENT = os.environ.get("MANGASYNC_ENVIRONMENT", None)
    sentry_sdk.init(
        SENTRY_BACKEND_DSN,
        environment=MANGASYNC_ENVIRONMENT,
        release=get_mangasync_version(),
        integrations=[CeleryIntegration()],
    )

app = Celery("mangasync")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django app configs. The ingest app
# keeps its tasks in a package, so it is listed explicitly in CELERY_IMPORTS.
app.autodiscover_tasks()
