from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from ingest.config import RUN_MODE_FULL, RUN_MODE_TOP30, IngestConfig

BASE_SETTINGS = {
    "IMAGE_SERVER": "http://images.example.com",
    "STORAGE_ROOT": "/srv/images",
    "SOURCE_ROOT": "http://manga.example.com",
    "POPULAR_FEED_URL": "http://feeds.example.com/popular",
}


class IngestConfigTests(SimpleTestCase):
    @override_settings(INGEST=BASE_SETTINGS)
    def test_defaults(self):
        config = IngestConfig.from_settings()

        self.assertEqual(config.run_mode, RUN_MODE_FULL)
        self.assertFalse(config.reverse)
        self.assertEqual(config.client_pool_size, 1)
        self.assertEqual(config.client_timeout, 120)
        self.assertEqual(config.shard_count, 100)
        self.assertEqual(config.catalog_retry_backoff, 300)
        self.assertEqual(config.lease_wait, 3)
        self.assertEqual(config.watermark_offset, (10, 5))
        self.assertEqual(config.jpeg_quality, 75)

    @override_settings(
        INGEST=dict(BASE_SETTINGS, SHARD_COUNT=10, WATERMARK_OFFSET=[1, 2], OTHER=1)
    )
    def test_settings_keys(self):
        config = IngestConfig.from_settings()

        self.assertEqual(config.shard_count, 10)
        self.assertEqual(config.watermark_offset, (1, 2))
        self.assertEqual(config.image_server, "http://images.example.com")

    @override_settings(INGEST=dict(BASE_SETTINGS, RUN_MODE="full", REVERSE=False))
    def test_overrides_win(self):
        config = IngestConfig.from_settings(run_mode="top30", reverse=True)

        self.assertEqual(config.run_mode, RUN_MODE_TOP30)
        self.assertTrue(config.reverse)

    @override_settings(INGEST=dict(BASE_SETTINGS, REVERSE=True))
    def test_none_overrides_are_ignored(self):
        config = IngestConfig.from_settings(run_mode=None, reverse=None)

        self.assertEqual(config.run_mode, RUN_MODE_FULL)
        self.assertTrue(config.reverse)

        self.assertEqual(config.with_overrides(reverse=None), config)
        self.assertFalse(config.with_overrides(reverse=False).reverse)

    def test_invalid_values(self):
        invalid = [
            {"run_mode": "everything"},
            {"image_server": ""},
            {"client_pool_size": 0},
            {"shard_count": 0},
            {"run_mode": RUN_MODE_TOP30, "popular_feed_url": ""},
        ]
        for overrides in invalid:
            values = {"image_server": "http://images", "storage_root": "/srv"}
            values["popular_feed_url"] = "http://feed"
            values.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(ImproperlyConfigured):
                    IngestConfig(**values)
