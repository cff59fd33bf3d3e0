"""
Source site adapters

The pipeline only talks to the :class:`Source` interface. The shipped
:class:`MangaReaderSource` scrapes a MangaReader-style site with
BeautifulSoup; each method is one request made with a client checked out of
the shared :class:`~ingest.clients.ClientPool`.
"""

from dataclasses import dataclass, field
from logging import getLogger
from typing import List, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .exceptions import DiscoveryError, DownloadError, NotFound, SiteUnavailable
from .utils import normalize_name

logger = getLogger(__name__)

NOT_FOUND_TEXT = "404 Not Found"


@dataclass(frozen=True)
class CategoryRef:
    name: str
    link: str


@dataclass(frozen=True)
class ChapterRef:
    name: str
    link: str


@dataclass(frozen=True)
class PageRef:
    page_no: int
    link: str


@dataclass(frozen=True)
class CategoryDetails:
    category_image: str
    alt_name: str = ""
    year_of_release: str = ""
    status: str = ""
    author: str = ""
    artist: str = ""
    description: str = ""
    genres: Tuple[str, ...] = field(default_factory=tuple)


class Source:
    """
    What the pipeline needs from a source site. Implementations raise
    DiscoveryError for failed listings, SiteUnavailable when the site answers
    with its not-found page and NotFound when an expected element is missing.
    """

    def list_categories(self) -> List[CategoryRef]:
        raise NotImplementedError

    def list_chapters(self, category: CategoryRef) -> List[ChapterRef]:
        raise NotImplementedError

    def list_pages(self, chapter: ChapterRef) -> List[PageRef]:
        raise NotImplementedError

    def resolve_page_image(self, page: PageRef) -> str:
        raise NotImplementedError

    def get_category_details(self, category: CategoryRef) -> CategoryDetails:
        raise NotImplementedError


def is_not_found_page(soup):
    """
    The site serves a bare ``<h1>404 Not Found</h1>`` document, sometimes
    with a 200 status, for pages it no longer has
    """
    heading = soup.find("h1")
    return (
        heading is not None
        and heading.get_text(strip=True) == NOT_FOUND_TEXT
        and soup.get_text(strip=True) == NOT_FOUND_TEXT
    )


class MangaReaderSource(Source):
    def __init__(self, pool, root_url):
        self.pool = pool
        self.root_url = root_url.rstrip("/")

    @classmethod
    def from_config(cls, config, pool):
        return cls(pool, config.source_root)

    def absolute_url(self, href):
        return urljoin(self.root_url + "/", href)

    def fetch_document(self, url, error_class=DiscoveryError):
        with self.pool.client() as client:
            try:
                resp = client.get(url)
            except requests.RequestException as exc:
                raise error_class(f"Unable to fetch {url}: {exc}") from exc

        soup = BeautifulSoup(resp.text, "html.parser")

        if resp.status_code == 404 or is_not_found_page(soup):
            raise SiteUnavailable(f"{url} returned the site's not-found page")

        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise error_class(f"Unable to fetch {url}: {exc}") from exc

        return soup

    def list_categories(self):
        listing_url = f"{self.root_url}/alphabetical"
        soup = self.fetch_document(listing_url)

        categories = []
        for anchor in soup.select("ul.series_alpha li a"):
            href = anchor.get("href")
            if not href:
                continue
            categories.append(
                CategoryRef(
                    name=normalize_name(anchor.get_text()),
                    link=self.absolute_url(href),
                )
            )

        logger.info("%s categories found on %s", len(categories), listing_url)
        return categories

    def list_chapters(self, category):
        soup = self.fetch_document(category.link)

        chapters = []
        for anchor in soup.select("table#listing a"):
            href = anchor.get("href")
            if not href:
                continue
            chapters.append(
                ChapterRef(
                    name=normalize_name(anchor.get_text()),
                    link=self.absolute_url(href),
                )
            )
        return chapters

    def list_pages(self, chapter):
        soup = self.fetch_document(chapter.link)

        pages = []
        # Page numbers follow option positions, including any option that
        # has no value and is skipped
        for index, option in enumerate(soup.select("select option")):
            value = option.get("value")
            if value:
                pages.append(PageRef(page_no=index + 1, link=self.absolute_url(value)))

        logger.info("Found %s pages for %s", len(pages), chapter.name)
        return pages

    def resolve_page_image(self, page):
        soup = self.fetch_document(page.link, error_class=DownloadError)

        image = soup.select_one("div#imgholder img#img")
        if image is None or not image.get("src"):
            raise NotFound(f"Cannot find the page image on {page.link}")
        return urljoin(page.link, image["src"])

    def get_category_details(self, category):
        soup = self.fetch_document(category.link)

        cover = soup.select_one("div#mangaimg img")
        if cover is None or not cover.get("src"):
            raise NotFound(f"Cannot find the category image on {category.link}")

        def property_value(row):
            cell = soup.select_one(
                f"div#mangaproperties table tr:nth-child({row}) td:nth-child(2)"
            )
            return cell.get_text().strip() if cell is not None else ""

        description = soup.select_one("div#readmangasum p")

        genres = tuple(
            span.get_text().strip()
            for span in soup.select(
                "div#mangaproperties table tr:nth-child(8) td:nth-child(2) span"
            )
        )

        return CategoryDetails(
            category_image=urljoin(category.link, cover["src"]),
            alt_name=property_value(2),
            year_of_release=property_value(3),
            status=property_value(4),
            author=property_value(5),
            artist=property_value(6),
            description=description.get_text().strip() if description else "",
            genres=genres,
        )


def fetch_popular_names(pool, feed_url):
    """
    Load the popularity feed: a JSON array of ``{"manga_name": ...}`` objects.
    Returns the normalized names.
    """
    with pool.client() as client:
        try:
            resp = client.get(feed_url)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise DiscoveryError(
                f"Unable to load the popularity feed {feed_url}: {exc}"
            ) from exc

    if not isinstance(data, list):
        raise DiscoveryError(f"Popularity feed {feed_url} did not return a list")

    return [
        normalize_name(entry["manga_name"])
        for entry in data
        if isinstance(entry, dict) and entry.get("manga_name")
    ]
