"""
See the module-level docstring of the ingest package for how these records
are created
"""

from logging import getLogger

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

logger = getLogger(__name__)


class Category(models.Model):
    """
    A manga series as listed by the source. ``name`` is always the
    normalized form (see ingest.utils.normalize_name)
    """

    name = models.TextField(unique=True)
    link = models.URLField(max_length=512)

    category_image = models.CharField(
        max_length=2048, blank=True, help_text="Cover image URL on the source site"
    )
    hosted_category_image = models.CharField(
        max_length=2048, blank=True, help_text="Servable URL of the stored cover"
    )
    alt_name = models.CharField(max_length=512, blank=True)
    year_of_release = models.CharField(max_length=512, blank=True)
    status = models.CharField(max_length=512, blank=True)
    author = models.CharField(max_length=512, blank=True)
    artist = models.CharField(max_length=512, blank=True)
    description = models.TextField(blank=True)

    created = models.DateTimeField(auto_now_add=True)
    modified = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class Genre(models.Model):
    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="genres"
    )
    name = models.CharField(max_length=512)

    created = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Chapter(models.Model):
    """
    One chapter of a category. Chapters are written once, together with all
    of their pages, and never modified afterwards
    """

    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="chapters"
    )
    name = models.TextField()
    link = models.URLField(max_length=512)
    chapter_no = models.PositiveIntegerField()
    total_pages = models.PositiveIntegerField(default=0)
    scraped = models.DateTimeField(
        default=timezone.now, help_text="Time the chapter was ingested"
    )

    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("category", "name"),)
        ordering = ("category", "chapter_no")

    def __str__(self):
        return self.name


class Page(models.Model):
    chapter = models.ForeignKey(Chapter, on_delete=models.CASCADE, related_name="pages")
    page_no = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    manga_src = models.CharField(
        max_length=2048, help_text="Image URL on the source site"
    )
    hosted_manga_src = models.CharField(
        max_length=2048, help_text="Servable URL of the watermarked copy"
    )

    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("chapter", "page_no"),)
        ordering = ("chapter", "page_no")

    def __str__(self):
        return "Page(chapter=%s, page_no=%s)" % (self.chapter_id, self.page_no)


class CategoryProcessing(models.Model):
    """
    Advisory lease marking a category as being processed by a running
    ingester. The unique column turns acquisition into an insert-if-absent.

    Leases have no expiry: a crashed run leaves its row behind until it is
    removed with the clear_category_leases management command
    """

    category_name = models.TextField(unique=True)

    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "category processing lease"

    def __str__(self):
        return "CategoryProcessing(category_name=%s)" % self.category_name
