from logging import getLogger

from django.db import DatabaseError, transaction

from mangasync.logging import HarvestLogger

from ..exceptions import PersistenceError
from ..models import Category, Genre
from ..utils import normalize_name

logger = getLogger(__name__)
structured_logger = HarvestLogger.get_logger(__name__)


def get_or_create_category(source, images, category_ref):
    """
    Return the stored Category for ``category_ref``, creating it the first
    time a category is seen.

    Creating a category loads its details page, stores the cover image
    without a watermark and writes the category and its genres together.
    """
    name = normalize_name(category_ref.name)

    try:
        return Category.objects.get(name=name)
    except Category.DoesNotExist:
        pass

    details = source.get_category_details(category_ref)
    hosted_cover = images.host_image(details.category_image)

    try:
        with transaction.atomic():
            category = Category.objects.create(
                name=name,
                link=category_ref.link,
                category_image=details.category_image,
                hosted_category_image=hosted_cover,
                alt_name=details.alt_name,
                year_of_release=details.year_of_release,
                status=details.status,
                author=details.author,
                artist=details.artist,
                description=details.description,
            )
            Genre.objects.bulk_create(
                [Genre(category=category, name=genre) for genre in details.genres]
            )
    except DatabaseError as exc:
        raise PersistenceError(f"Unable to store category {name}: {exc}") from exc

    structured_logger.info(
        "Category created.",
        event_code="category_created",
        category=category,
        genre_count=len(details.genres),
    )
    return category
