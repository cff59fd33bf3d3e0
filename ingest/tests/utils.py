import io
import os
import shutil
import tempfile
import threading

import requests
from django.core.files.storage import InMemoryStorage
from PIL import Image

SOURCE_ROOT = "http://manga.example.com"
IMAGE_HOST = "http://img.example.com"
IMAGE_BASE_URL = "http://images.example.com/images/"
FEED_URL = "http://feeds.example.com/api/feeds/popular"

NOT_FOUND_HTML = "<html><body><h1>404 Not Found</h1></body></html>"


class FakeResponse:
    def __init__(
        self, text="", status_code=200, content=b"", headers=None, json_data=None
    ):
        self.text = text
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self._json_data = json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_data


class FakeSession:
    """
    Stands in for requests.Session. ``routes`` maps a URL to a FakeResponse
    or to an exception to raise; unknown URLs raise ConnectionError.
    """

    def __init__(self, routes, calls):
        self.routes = routes
        self.calls = calls
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self):
        self.closed = True


class FakeSessionFactory:
    def __init__(self, routes=None):
        self.routes = routes if routes is not None else {}
        self.calls = []
        self.sessions = []
        self._lock = threading.Lock()

    def __call__(self):
        session = FakeSession(self.routes, self.calls)
        with self._lock:
            self.sessions.append(session)
        return session

    @property
    def requested_urls(self):
        return [url for url, _ in self.calls]


def image_bytes(fmt="JPEG", size=(40, 30), color=(255, 255, 255)):
    buf = io.BytesIO()
    mode = "RGBA" if fmt == "PNG" and len(color) == 4 else "RGB"
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def image_response(fmt="JPEG", content_type="image/jpeg", **kwargs):
    return FakeResponse(
        content=image_bytes(fmt, **kwargs), headers={"Content-Type": content_type}
    )


def create_watermark(test_case, size=(6, 6), color=(255, 0, 0, 255)):
    """
    Write a PNG watermark to a temporary directory removed after the test and
    return its path
    """
    directory = tempfile.mkdtemp()
    test_case.addCleanup(shutil.rmtree, directory, ignore_errors=True)
    path = os.path.join(directory, "watermark.png")
    Image.new("RGBA", size, color).save(path, format="PNG")
    return path


def create_page_storage():
    return InMemoryStorage(base_url=IMAGE_BASE_URL)


def stored_files(storage):
    """
    Every file name in a storage laid out as ``<bucket>/<name>``
    """
    names = []
    directories, files = storage.listdir("")
    names.extend(files)
    for directory in directories:
        names.extend(f"{directory}/{name}" for name in storage.listdir(directory)[1])
    return sorted(names)


def slugify(name):
    return name.lower().replace(" ", "-")


def catalog_html(category_names):
    items = "".join(
        f'<li><a href="/{slugify(name)}">{name}</a></li>' for name in category_names
    )
    return f'<html><body><ul class="series_alpha">{items}</ul></body></html>'


def category_html(
    name,
    chapter_names,
    cover="cover.jpg",
    genres=("Action", "Adventure"),
    description="A story.",
):
    slug = slugify(name)
    cover_html = (
        f'<div id="mangaimg"><img src="{IMAGE_HOST}/{slug}/{cover}"></div>'
        if cover
        else ""
    )
    genre_html = "".join(
        f'<a href="/genre/{g.lower()}"><span class="genretags">{g}</span></a>'
        for g in genres
    )
    chapter_rows = "".join(
        f'<tr><td><a href="/{slug}/{index}">{chapter}</a> : </td></tr>'
        for index, chapter in enumerate(chapter_names, start=1)
    )
    return f"""
    <html><body>
    {cover_html}
    <div id="mangaproperties"><table>
    <tr><td>Name:</td><td><h2 class="aname">{name}</h2></td></tr>
    <tr><td>Alternate Name:</td><td>{name} Alt</td></tr>
    <tr><td>Year of Release:</td><td>2001</td></tr>
    <tr><td>Status:</td><td>Ongoing</td></tr>
    <tr><td>Author:</td><td>Some Author</td></tr>
    <tr><td>Artist:</td><td>Some Artist</td></tr>
    <tr><td>Reading Direction:</td><td>Right to Left</td></tr>
    <tr><td>Genre:</td><td>{genre_html}</td></tr>
    </table></div>
    <div id="readmangasum"><h2>Read {name} Manga Online</h2><p>{description}</p></div>
    <table id="listing">{chapter_rows}</table>
    </body></html>
    """


def chapter_html(page_links):
    options = "".join(
        f'<option value="{link}">{index}</option>'
        for index, link in enumerate(page_links, start=1)
    )
    return (
        f'<html><body><select id="pageMenu" name="pageMenu">{options}</select>'
        "</body></html>"
    )


def page_html(image_src):
    return (
        '<html><body><div id="imgholder"><a href="#">'
        f'<img id="img" src="{image_src}"></a></div></body></html>'
    )


def build_site_routes(catalog, root=SOURCE_ROOT, routes=None):
    """
    Routes for a small source site.

    ``catalog`` maps a category name to a list of ``(chapter_name,
    page_count)`` tuples. Chapter ``n`` (1-based, listing order) of category
    ``slug`` lives at ``/<slug>/<n>``, its pages at ``/<slug>/<n>/<page>`` and
    the page images at ``IMAGE_HOST/<slug>/<n>/<page>.jpg``.
    """
    routes = routes if routes is not None else {}
    routes[f"{root}/alphabetical"] = FakeResponse(text=catalog_html(list(catalog)))

    for name, chapters in catalog.items():
        slug = slugify(name)
        routes[f"{root}/{slug}"] = FakeResponse(
            text=category_html(name, [chapter for chapter, _ in chapters])
        )
        routes[f"{IMAGE_HOST}/{slug}/cover.jpg"] = image_response()

        for index, (_, page_count) in enumerate(chapters, start=1):
            page_links = [
                f"/{slug}/{index}/{page}" for page in range(1, page_count + 1)
            ]
            routes[f"{root}/{slug}/{index}"] = FakeResponse(
                text=chapter_html(page_links)
            )
            for page in range(1, page_count + 1):
                image_src = f"{IMAGE_HOST}/{slug}/{index}/{page}.jpg"
                routes[f"{root}/{slug}/{index}/{page}"] = FakeResponse(
                    text=page_html(image_src)
                )
                routes[image_src] = image_response()

    return routes
