import os

from django.core.exceptions import ImproperlyConfigured

from .settings_template import *  # NOQA ignore=F405
from .settings_template import LOGGING

# JSON events only; the console renderer is for local runs
LOGGING["loggers"]["structlog"]["handlers"] = ["events_file"]
LOGGING["loggers"]["ingest"]["handlers"] = ["ingest_file"]

DEBUG = False

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY")
if not SECRET_KEY:
    raise ImproperlyConfigured("DJANGO_SECRET_KEY must be set in production")

if not os.getenv("IMAGE_SERVER"):
    raise ImproperlyConfigured("IMAGE_SERVER must be set in production")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "pyamqp://guest@rabbit:5672")
CELERY_RESULT_BACKEND = "rpc://"
