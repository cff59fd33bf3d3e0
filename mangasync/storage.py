from django.conf import settings
from django.core.files.storage import storages


def page_storage(location, base_url):
    """
    Instantiate the ``pages`` storage backend rooted at ``location`` and
    serving files under ``base_url``.

    Page images and category covers share one sharded store. The backend
    class and its other options come from ``STORAGES["pages"]``; where files
    live and how they're addressed always come from the ingestion config.
    """
    params = settings.STORAGES["pages"]
    options = {
        **params.get("OPTIONS", {}),
        "location": location,
        "base_url": base_url,
    }
    return storages.create_storage({**params, "OPTIONS": options})
