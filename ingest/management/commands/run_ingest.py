"""
Run the ingester.

Without --once this never returns: catalog failures are retried after the
configured backoff and every other failure is logged and skipped.

Usage:
    python manage.py run_ingest
    python manage.py run_ingest --run-mode top30 --reverse
    python manage.py run_ingest --once

Settings are read from ``settings.INGEST``; the switches below override
``RUN_MODE`` and ``REVERSE`` for this run.
"""

from argparse import ArgumentParser

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from ...config import RUN_MODES, IngestConfig
from ...tasks.catalog import CatalogOrchestrator
from ...utils import ensure_shard_folders


class Command(BaseCommand):
    help = "Continuously ingest new chapters from the source site"  # NOQA: A003

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--run-mode",
            choices=RUN_MODES,
            default=None,
            help="Ingest every category or only the popular ones",
        )
        parser.add_argument(
            "--reverse",
            action="store_true",
            default=None,
            help="Walk the catalog from the end",
        )
        parser.add_argument(
            "--once",
            action="store_true",
            default=False,
            help="Stop after a single pass over the catalog",
        )

    def handle(self, *, run_mode, reverse, once, **options):
        try:
            config = IngestConfig.from_settings(run_mode=run_mode, reverse=reverse)
        except ImproperlyConfigured as exc:
            raise CommandError(str(exc)) from exc

        ensure_shard_folders(config.storage_root, config.shard_count)

        orchestrator = CatalogOrchestrator.from_config(config)

        self.stdout.write(
            "Ingesting in %s mode%s"
            % (config.run_mode, " (reversed)" if config.reverse else "")
        )

        try:
            orchestrator.run_forever(max_passes=1 if once else None)
        finally:
            orchestrator.close()
