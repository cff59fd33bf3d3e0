import os
import re
from typing import Iterable, List

from .exceptions import InvalidChapterNumber

# ASCII semantics on purpose: accented letters and non-ASCII digits are
# stripped like any other punctuation.
SPECIAL_CHARACTERS_RE = re.compile(r"[^a-zA-Z\d\s]", re.ASCII)
WHITESPACE_RE = re.compile(r"\s+", re.ASCII)
CHAPTER_NUMBER_RE = re.compile(r"\d+", re.ASCII)

FNV_32_OFFSET_BASIS = 0x811C9DC5
FNV_32_PRIME = 0x01000193


def normalize_name(name: str) -> str:
    """
    Canonical form of a category or chapter name, used as the lookup and
    storage key: everything but ASCII letters, digits and whitespace is
    removed, whitespace runs collapse to one space and the ends are trimmed.

    >>> normalize_name("#000000 - Ultra Black 3")
    '000000 Ultra Black 3'
    """
    out = SPECIAL_CHARACTERS_RE.sub("", name).strip()
    return WHITESPACE_RE.sub(" ", out).strip()


def except_names(discovered: Iterable[str], existing: Iterable[str]) -> List[str]:
    """
    Return the names in ``discovered`` which are not in ``existing``, keeping
    discovery order. Both sides are compared after trimming only.
    """
    known = {name.strip() for name in existing}
    return [name for name in discovered if name.strip() not in known]


def parse_chapter_number(category_name: str, chapter_name: str) -> int:
    """
    Derive a chapter's sequence number by removing the category name from the
    front of the chapter name, e.g. ("Naruto", "Naruto 42") -> 42.

    Both names are normalized first. Raises InvalidChapterNumber when the
    remainder is not a plain number.
    """
    prefix = normalize_name(category_name)
    remainder = normalize_name(chapter_name)
    if prefix and remainder.startswith(prefix):
        remainder = remainder[len(prefix) :]
    remainder = remainder.strip()

    if not CHAPTER_NUMBER_RE.fullmatch(remainder):
        raise InvalidChapterNumber(
            f"Cannot derive a chapter number from {chapter_name!r} "
            f"in category {category_name!r}"
        )
    return int(remainder)


def fnv1a_32(value: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 encoding of ``value``."""
    result = FNV_32_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        result ^= byte
        result = (result * FNV_32_PRIME) & 0xFFFFFFFF
    return result


def shard_bucket(identifier: str, shard_count: int) -> int:
    return fnv1a_32(identifier) % shard_count


def shard_storage_name(identifier: str, shard_count: int, extension="jpg") -> str:
    """
    Storage-relative path for a content identifier: ``<bucket>/<id>.<ext>``.
    The same identifier always lands in the same bucket.
    """
    return f"{shard_bucket(identifier, shard_count)}/{identifier}.{extension}"


def ensure_shard_folders(storage_root: str, shard_count: int) -> None:
    """
    Create the ``0`` .. ``shard_count - 1`` bucket directories under
    ``storage_root`` if they don't exist yet.
    """
    for bucket in range(shard_count):
        os.makedirs(os.path.join(storage_root, str(bucket)), exist_ok=True)
