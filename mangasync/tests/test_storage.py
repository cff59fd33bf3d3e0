from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage, InMemoryStorage
from django.test import SimpleTestCase, override_settings

from mangasync.storage import page_storage


class PageStorageTests(SimpleTestCase):
    def test_uses_the_pages_backend(self):
        storage = page_storage("/srv/pages", "http://cdn.example.org/images/")

        self.assertIsInstance(storage, InMemoryStorage)
        name = storage.save("7/abc.jpg", ContentFile(b"data"))
        self.assertEqual(name, "7/abc.jpg")
        self.assertEqual(storage.url(name), "http://cdn.example.org/images/7/abc.jpg")

    @override_settings(
        STORAGES={
            "pages": {
                "BACKEND": "django.core.files.storage.FileSystemStorage",
                "OPTIONS": {
                    "location": "/somewhere/else",
                    "base_url": "http://stale.example.com/",
                    "file_permissions_mode": 0o644,
                },
            }
        }
    )
    def test_location_and_base_url_override_backend_options(self):
        storage = page_storage("/srv/pages", "http://cdn.example.org/images/")

        self.assertIsInstance(storage, FileSystemStorage)
        self.assertEqual(storage.location, "/srv/pages")
        self.assertEqual(storage.base_url, "http://cdn.example.org/images/")
        self.assertEqual(storage.file_permissions_mode, 0o644)
