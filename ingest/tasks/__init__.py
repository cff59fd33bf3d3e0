"""
See the module-level docstring of the ingest package for implementation details
"""

from .catalog import CatalogOrchestrator, ingest_catalog_task
from .categories import get_or_create_category
from .chapters import ChapterWorker, get_new_chapters
from .images import HostedPage, PageImagePipeline

__all__ = [
    "CatalogOrchestrator",
    "ChapterWorker",
    "HostedPage",
    "PageImagePipeline",
    "get_new_chapters",
    "get_or_create_category",
    "ingest_catalog_task",
]
