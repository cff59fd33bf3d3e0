import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=512, unique=True)),
                ("link", models.URLField(max_length=512)),
                (
                    "category_image",
                    models.CharField(
                        blank=True,
                        help_text="Cover image URL on the source site",
                        max_length=2048,
                    ),
                ),
                (
                    "hosted_category_image",
                    models.CharField(
                        blank=True,
                        help_text="Servable URL of the stored cover",
                        max_length=2048,
                    ),
                ),
                ("alt_name", models.CharField(blank=True, max_length=512)),
                ("year_of_release", models.CharField(blank=True, max_length=512)),
                ("status", models.CharField(blank=True, max_length=512)),
                ("author", models.CharField(blank=True, max_length=512)),
                ("artist", models.CharField(blank=True, max_length=512)),
                ("description", models.TextField(blank=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("modified", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="CategoryProcessing",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("category_name", models.CharField(max_length=512, unique=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "category processing lease",
            },
        ),
        migrations.CreateModel(
            name="Genre",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=512)),
                ("created", models.DateTimeField(auto_now_add=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="genres",
                        to="ingest.category",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Chapter",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=1024)),
                ("link", models.URLField(max_length=512)),
                ("chapter_no", models.PositiveIntegerField()),
                ("total_pages", models.PositiveIntegerField(default=0)),
                (
                    "scraped",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="Time the chapter was ingested",
                    ),
                ),
                ("created", models.DateTimeField(auto_now_add=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chapters",
                        to="ingest.category",
                    ),
                ),
            ],
            options={
                "ordering": ("category", "chapter_no"),
                "unique_together": {("category", "name")},
            },
        ),
        migrations.CreateModel(
            name="Page",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "page_no",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "manga_src",
                    models.CharField(
                        help_text="Image URL on the source site", max_length=2048
                    ),
                ),
                (
                    "hosted_manga_src",
                    models.CharField(
                        help_text="Servable URL of the watermarked copy",
                        max_length=2048,
                    ),
                ),
                ("created", models.DateTimeField(auto_now_add=True)),
                (
                    "chapter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pages",
                        to="ingest.chapter",
                    ),
                ),
            ],
            options={
                "ordering": ("chapter", "page_no"),
                "unique_together": {("chapter", "page_no")},
            },
        ),
    ]
