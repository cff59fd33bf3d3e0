"""
Ingestion configuration

All runtime knobs are read once from ``settings.INGEST`` into an immutable
:class:`IngestConfig` which is then handed to the components that need it, so
nothing in the pipeline reads global state on its own.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

RUN_MODE_FULL = "full"
RUN_MODE_TOP30 = "top30"
RUN_MODES = (RUN_MODE_FULL, RUN_MODE_TOP30)


@dataclass(frozen=True)
class IngestConfig:
    image_server: str
    storage_root: str
    source_root: str = "http://www.mangareader.net"
    popular_feed_url: str = ""
    run_mode: str = RUN_MODE_FULL
    reverse: bool = False
    client_pool_size: int = 1
    client_timeout: float = 2 * 60
    shard_count: int = 100
    catalog_retry_backoff: float = 5 * 60
    lease_wait: float = 3
    watermark_path: str = "watermark.png"
    watermark_offset: Tuple[int, int] = field(default=(10, 5))
    jpeg_quality: int = 75

    def __post_init__(self):
        if self.run_mode not in RUN_MODES:
            raise ImproperlyConfigured(
                f"Unknown run mode {self.run_mode!r}; expected one of {RUN_MODES}"
            )
        if not self.image_server:
            raise ImproperlyConfigured("An image server base URL is required")
        if self.client_pool_size < 1:
            raise ImproperlyConfigured("CLIENT_POOL_SIZE must be at least 1")
        if self.shard_count < 1:
            raise ImproperlyConfigured("SHARD_COUNT must be at least 1")
        if self.run_mode == RUN_MODE_TOP30 and not self.popular_feed_url:
            raise ImproperlyConfigured("The top30 run mode needs POPULAR_FEED_URL")

    @classmethod
    def from_settings(cls, **overrides):
        """
        Build a config from ``settings.INGEST``.

        Keys are the upper-case field names (``RUN_MODE``, ``SHARD_COUNT``...).
        Unknown keys are ignored; ``overrides`` use the lower-case field names
        and win over settings, which is how the management command applies
        its command-line switches.
        """
        raw = getattr(settings, "INGEST", {})
        known = {f.name for f in fields(cls)}
        values = {
            key.lower(): value for key, value in raw.items() if key.lower() in known
        }
        if "watermark_offset" in values:
            values["watermark_offset"] = tuple(values["watermark_offset"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def images_base_url(self):
        """
        Servable URL prefix of the page store, e.g.
        ``http://images.example.com/images/``
        """
        return f"{self.image_server.rstrip('/')}/images/"

    def with_overrides(self, **overrides):
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
