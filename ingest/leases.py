from contextlib import contextmanager
from logging import getLogger
from typing import Generator, Optional

from django.db import DatabaseError

from .exceptions import PersistenceError
from .models import CategoryProcessing
from .utils import normalize_name

logger = getLogger(__name__)


def try_acquire(category_name: str) -> Optional[CategoryProcessing]:
    """
    Mark a category as being processed.

    Returns the new lease, or None if another run already holds one for the
    same normalized name. get_or_create over the unique ``category_name``
    column is an insert-if-absent, so two callers racing for the same
    category can't both succeed.
    """
    key = normalize_name(category_name)
    try:
        lease, created = CategoryProcessing.objects.get_or_create(category_name=key)
    except DatabaseError as exc:
        raise PersistenceError(f"Unable to create a lease for {key}") from exc

    if not created:
        logger.info("Category %s is already being processed", key)
        return None

    logger.info("Acquired processing lease for %s", key)
    return lease


def release(lease: CategoryProcessing) -> None:
    """
    Delete the lease row unconditionally
    """
    CategoryProcessing.objects.filter(pk=lease.pk).delete()
    logger.info("Released processing lease for %s", lease.category_name)


@contextmanager
def category_lease(
    category_name: str,
) -> Generator[Optional[CategoryProcessing], None, None]:
    """
    Hold the processing lease for a category for the duration of the block.

    Yields the lease, or None if the category is locked by another run. An
    acquired lease is released on exit whether or not the block raised.

    Usage:
        with category_lease(category.name) as lease:
            if lease is None:
                # someone else is working on it
            else:
                # process the category
    """
    lease = try_acquire(category_name)
    try:
        yield lease
    finally:
        if lease is not None:
            release(lease)


def clear_leases(category_names=None) -> int:
    """
    Remove stale leases left by crashed runs. With no names, every lease is
    removed. Returns the number of rows deleted.
    """
    qs = CategoryProcessing.objects.all()
    if category_names:
        qs = qs.filter(category_name__in=[normalize_name(n) for n in category_names])
    deleted, _ = qs.delete()
    return deleted
