import time
from logging import getLogger

from mangasync.celery import app
from mangasync.logging import HarvestLogger

from ..clients import ClientPool
from ..config import RUN_MODE_TOP30, IngestConfig
from ..exceptions import IngestError
from ..leases import category_lease
from ..sources import MangaReaderSource, fetch_popular_names
from ..utils import normalize_name
from .categories import get_or_create_category
from .chapters import ChapterWorker, get_new_chapters
from .images import PageImagePipeline

logger = getLogger(__name__)
structured_logger = HarvestLogger.get_logger(__name__)


class CatalogOrchestrator:
    """
    The control loop: list the catalog, then for each category take its
    lease, find the chapters not stored yet and ingest them one at a time.

    A failed catalog listing pauses the loop for ``catalog_retry_backoff``
    seconds; every other failure is logged and the loop moves on.
    """

    def __init__(self, config, source, pool, worker, images, sleep=time.sleep):
        self.config = config
        self.source = source
        self.pool = pool
        self.worker = worker
        self.images = images
        self.sleep = sleep

    @classmethod
    def from_config(cls, config, storage=None, session_factory=None, **kwargs):
        pool_kwargs = {}
        if session_factory is not None:
            pool_kwargs["session_factory"] = session_factory
        pool = ClientPool.from_config(config, **pool_kwargs)

        source = MangaReaderSource.from_config(config, pool)
        images = PageImagePipeline.from_config(config, source, pool, storage=storage)
        worker = ChapterWorker(source, images)
        return cls(config, source, pool, worker, images, **kwargs)

    def list_categories(self):
        categories = self.source.list_categories()

        if self.config.run_mode == RUN_MODE_TOP30:
            popular = set(
                fetch_popular_names(self.pool, self.config.popular_feed_url)
            )
            categories = [c for c in categories if normalize_name(c.name) in popular]
            logger.info("%s categories match the popularity feed", len(categories))

        if self.config.reverse:
            categories = list(reversed(categories))

        return categories

    def run_once(self):
        """
        One pass over the catalog. Returns False when the catalog could not
        be listed (after sleeping for the retry backoff), True otherwise.
        """
        try:
            categories = self.list_categories()
        except IngestError as exc:
            structured_logger.error(
                "Unable to list the catalog.",
                event_code="catalog_listing_failed",
                reason=str(exc),
                reason_code=type(exc).__name__,
                retry_in=self.config.catalog_retry_backoff,
            )
            self.sleep(self.config.catalog_retry_backoff)
            return False

        structured_logger.info(
            "Catalog pass started.",
            event_code="catalog_pass_started",
            category_count=len(categories),
            run_mode=self.config.run_mode,
            reverse=self.config.reverse,
        )

        for category_ref in categories:
            try:
                self.process_category(category_ref)
            except Exception:
                logger.exception("Unable to process category %s", category_ref.name)

        structured_logger.info(
            "Catalog pass finished.",
            event_code="catalog_pass_finished",
            category_count=len(categories),
        )
        return True

    def process_category(self, category_ref):
        with category_lease(category_ref.name) as lease:
            if lease is None:
                structured_logger.warning(
                    "Category is already being processed.",
                    event_code="category_lease_conflict",
                    reason="Another run holds the processing lease.",
                    reason_code="lease_held",
                    category=category_ref,
                )
                self.sleep(self.config.lease_wait)
                return

            self.ingest_category(category_ref, lease)

    def ingest_category(self, category_ref, lease):
        try:
            new_chapters = get_new_chapters(self.source, category_ref)
        except IngestError as exc:
            structured_logger.warning(
                "Unable to list the chapters of a category.",
                event_code="category_chapters_listing_failed",
                reason=str(exc),
                reason_code=type(exc).__name__,
                category=category_ref,
                lease=lease,
            )
            return

        if not new_chapters:
            logger.info("No new chapters for %s", category_ref.name)
            return

        try:
            category = get_or_create_category(self.source, self.images, category_ref)
        except IngestError as exc:
            structured_logger.error(
                "Unable to create the category.",
                event_code="category_create_failed",
                reason=str(exc),
                reason_code=type(exc).__name__,
                category=category_ref,
                lease=lease,
            )
            return

        for chapter_ref in new_chapters:
            try:
                self.worker.process(category, chapter_ref)
            except Exception as exc:
                logger.exception(
                    "Unable to ingest chapter %s of %s",
                    chapter_ref.name,
                    category.name,
                )
                structured_logger.error(
                    "Chapter ingestion failed.",
                    event_code="chapter_ingest_failed",
                    reason=str(exc),
                    reason_code=type(exc).__name__,
                    category=category,
                    chapter=chapter_ref,
                )

    def run_forever(self, max_passes=None):
        """
        Repeat run_once until ``max_passes`` passes have been attempted, or
        indefinitely when it is None
        """
        passes = 0
        while max_passes is None or passes < max_passes:
            self.run_once()
            passes += 1

    def close(self):
        self.pool.close()


@app.task(bind=True)
def ingest_catalog_task(self, run_mode=None, reverse=None):
    config = IngestConfig.from_settings(run_mode=run_mode, reverse=reverse)
    orchestrator = CatalogOrchestrator.from_config(config)
    try:
        return orchestrator.run_once()
    finally:
        orchestrator.close()
