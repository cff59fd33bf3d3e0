import os

import sentry_sdk
import structlog
from django.core.management.utils import get_random_secret_key
from sentry_sdk.integrations.django import DjangoIntegration

from mangasync.version import get_mangasync_version

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"

# Build paths inside the project like this: os.path.join(SITE_ROOT_DIR, ...)
MANGASYNC_APP_DIR = os.path.abspath(os.path.dirname(__file__))
SITE_ROOT_DIR = os.path.dirname(MANGASYNC_APP_DIR)

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", get_random_secret_key())

MANGASYNC_ENVIRONMENT = os.environ.get("MANGASYNC_ENVIRONMENT", "development")

ALLOWED_HOSTS = []

DEBUG = False

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "mangasync"),
        "USER": os.getenv("POSTGRES_USER", "mangasync"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "HOST": os.getenv("POSTGRES_HOST", "localhost"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
        "CONN_MAX_AGE": 0,
    }
}

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "ingest.apps.IngestAppConfig",
]

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_IMPORTS = ("ingest.tasks",)
# A catalog pass can take hours; one task at a time per worker process
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True

################################################################################
# Ingestion settings
################################################################################

#: Externally reachable host serving the images directory, without a
#: trailing slash
IMAGE_SERVER = os.getenv("IMAGE_SERVER", "http://localhost:8080")

#: Local directory holding the sharded page images
IMAGES_ROOT = os.getenv("INGEST_IMAGES_ROOT", os.path.join(SITE_ROOT_DIR, "images"))

INGEST = {
    # "full" processes every category; "top30" only the popular feed's
    "RUN_MODE": os.getenv("INGEST_RUN_MODE", "full"),
    "REVERSE": os.getenv("INGEST_REVERSE", "") == "1",
    "SOURCE_ROOT": os.getenv("INGEST_SOURCE_ROOT", "http://www.mangareader.net"),
    "POPULAR_FEED_URL": os.getenv(
        "INGEST_POPULAR_FEED_URL", "http://localhost:8000/api/feeds/popular"
    ),
    "IMAGE_SERVER": IMAGE_SERVER,
    "STORAGE_ROOT": IMAGES_ROOT,
    "CLIENT_POOL_SIZE": int(os.getenv("INGEST_CLIENT_POOL_SIZE", "1")),
    "CLIENT_TIMEOUT": 2 * 60,
    "SHARD_COUNT": 100,
    "CATALOG_RETRY_BACKOFF": 5 * 60,
    "LEASE_WAIT": 3,
    "WATERMARK_PATH": os.getenv(
        "INGEST_WATERMARK_PATH", os.path.join(SITE_ROOT_DIR, "watermark.png")
    ),
    "WATERMARK_OFFSET": (10, 5),
    "JPEG_QUALITY": 75,
}

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    # Location and base URL come from INGEST["STORAGE_ROOT"] and
    # INGEST["IMAGE_SERVER"]
    "pages": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {"file_permissions_mode": 0o644},
    },
}

LOG_DIR = os.getenv("MANGASYNC_LOG_DIR", os.path.join(SITE_ROOT_DIR, "logs"))
os.makedirs(LOG_DIR, exist_ok=True)


def rotating_log_handler(filename, formatter="plain", level="INFO"):
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "filename": os.path.join(LOG_DIR, filename),
        "formatter": formatter,
        "level": level,
        "when": "midnight",
        "backupCount": 14,
    }


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "{asctime} {levelname} [{name}:{lineno}] {message}",
            "style": "{",
        },
        "json": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.processors.JSONRenderer(),
        },
        "console": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.dev.ConsoleRenderer(colors=False),
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
        "ingest_file": rotating_log_handler("ingest.log"),
        "celery_file": rotating_log_handler("celery.log"),
        "events_file": rotating_log_handler(
            "ingest-events.json.log", formatter="json", level="DEBUG"
        ),
        "events_console": {"class": "logging.StreamHandler", "formatter": "console"},
    },
    "loggers": {
        "django": {"handlers": ["ingest_file"], "level": "WARNING"},
        "celery": {"handlers": ["celery_file"], "level": "INFO"},
        "ingest": {"handlers": ["ingest_file", "console"], "level": "INFO"},
        "mangasync": {"handlers": ["ingest_file"], "level": "INFO"},
        # HarvestLogger output, see mangasync.logging
        "structlog": {
            "handlers": ["events_file", "events_console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

SENTRY_BACKEND_DSN = os.environ.get("SENTRY_BACKEND_DSN", "")

APPLICATION_VERSION = get_mangasync_version()

sentry_sdk.init(
    dsn=SENTRY_BACKEND_DSN,
    environment=MANGASYNC_ENVIRONMENT,
    release=APPLICATION_VERSION,
    integrations=[DjangoIntegration()],
)
