from django.apps.config import AppConfig


class IngestAppConfig(AppConfig):
    name = "ingest"
    verbose_name = "Chapter ingestion"
