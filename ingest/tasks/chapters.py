import concurrent.futures
from logging import getLogger

from django.db import DatabaseError, transaction
from django.utils import timezone

from mangasync.logging import HarvestLogger

from ..exceptions import NotFound, PersistenceError
from ..models import Chapter, Page
from ..utils import except_names, normalize_name, parse_chapter_number

logger = getLogger(__name__)
structured_logger = HarvestLogger.get_logger(__name__)


def get_new_chapters(source, category_ref):
    """
    Return the chapters listed by the source for a category which haven't
    been stored yet, in the order the source lists them
    """
    discovered = source.list_chapters(category_ref)

    existing = (
        Chapter.objects.filter(category__name=normalize_name(category_ref.name))
        .values_list("name", flat=True)
        .distinct()
    )

    new_names = set(except_names([c.name for c in discovered], existing))
    new_chapters = [c for c in discovered if c.name in new_names]

    logger.info(
        "%s of %s chapters of %s are new",
        len(new_chapters),
        len(discovered),
        category_ref.name,
    )
    return new_chapters


class ChapterWorker:
    """
    Ingests one chapter as a single unit.

    Every page is processed in its own thread; the client pool is what
    bounds network concurrency. The chapter and its pages are only written
    to the database when every page succeeded, and files stored for pages of
    a failed chapter are deleted again.
    """

    def __init__(self, source, images):
        self.source = source
        self.images = images

    def fetch_pages(self, pages):
        """
        Run every page through the image pipeline and wait for all of them.

        Returns the hosted pages ordered by page number. If any page failed,
        the files of the pages that did succeed are discarded and the first
        failure to complete is raised.
        """
        hosted_pages = []
        first_error = None

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(pages)) as executor:
            futures = [executor.submit(self.images.process_page, p) for p in pages]
            for future in concurrent.futures.as_completed(futures):
                try:
                    hosted_pages.append(future.result())
                except Exception as exc:
                    if first_error is None:
                        first_error = exc

        if first_error is not None:
            self.images.discard([h.storage_name for h in hosted_pages])
            raise first_error

        return sorted(hosted_pages, key=lambda h: h.page_no)

    def process(self, category, chapter_ref):
        """
        Ingest ``chapter_ref`` into the persisted ``category`` and return the
        new Chapter
        """
        chapter_logger = structured_logger.bind(category=category, chapter=chapter_ref)

        pages = self.source.list_pages(chapter_ref)
        if not pages:
            raise NotFound(f"No pages found for chapter {chapter_ref.name}")

        chapter_logger.info(
            "Fetching chapter pages.",
            event_code="chapter_pages_fetch_started",
            page_count=len(pages),
        )

        hosted_pages = self.fetch_pages(pages)

        try:
            chapter_no = parse_chapter_number(category.name, chapter_ref.name)
            chapter = self.persist(category, chapter_ref, chapter_no, hosted_pages)
        except Exception:
            self.images.discard([h.storage_name for h in hosted_pages])
            raise

        chapter_logger.info(
            "Chapter persisted.",
            event_code="chapter_persisted",
            chapter=chapter,
            chapter_no=chapter_no,
            page_count=len(hosted_pages),
        )
        return chapter

    def persist(self, category, chapter_ref, chapter_no, hosted_pages):
        try:
            with transaction.atomic():
                chapter = Chapter.objects.create(
                    category=category,
                    name=normalize_name(chapter_ref.name),
                    link=chapter_ref.link,
                    chapter_no=chapter_no,
                    total_pages=len(hosted_pages),
                    scraped=timezone.now(),
                )
                Page.objects.bulk_create(
                    [
                        Page(
                            chapter=chapter,
                            page_no=hosted.page_no,
                            manga_src=hosted.manga_src,
                            hosted_manga_src=hosted.hosted_manga_src,
                        )
                        for hosted in hosted_pages
                    ]
                )
        except DatabaseError as exc:
            raise PersistenceError(
                f"Unable to store chapter {chapter_ref.name}: {exc}"
            ) from exc

        return chapter
