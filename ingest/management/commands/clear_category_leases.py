"""
Remove category processing leases left behind by an ingester that crashed.

Leases never expire on their own, so a category whose lease outlived its
ingester is skipped by every later run until the lease is removed here.

Usage:
    python manage.py clear_category_leases "One Piece" Naruto
    python manage.py clear_category_leases --all
"""

from argparse import ArgumentParser

from django.core.management.base import BaseCommand, CommandError

from ...leases import clear_leases


class Command(BaseCommand):
    help = "Remove stale category processing leases"  # NOQA: A003

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "category_names", nargs="*", help="Categories whose lease to remove"
        )
        parser.add_argument(
            "--all", action="store_true", help="Remove every lease"
        )

    def handle(self, *, category_names, all, **options):  # NOQA: A002
        if not category_names and not all:
            raise CommandError("Name at least one category or pass --all")
        if category_names and all:
            raise CommandError("Category names can't be combined with --all")

        deleted = clear_leases(category_names or None)
        self.stdout.write("Removed %d lease(s)" % deleted)
