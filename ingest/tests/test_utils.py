import os
import shutil
import tempfile

from django.test import SimpleTestCase

from ingest.exceptions import InvalidChapterNumber
from ingest.utils import (
    ensure_shard_folders,
    except_names,
    fnv1a_32,
    normalize_name,
    parse_chapter_number,
    shard_bucket,
    shard_storage_name,
)


class NormalizeNameTests(SimpleTestCase):
    def test_examples(self):
        self.assertEqual(normalize_name("  One   Piece!! "), "One Piece")
        self.assertEqual(
            normalize_name("#000000 - Ultra Black 3"), "000000 Ultra Black 3"
        )
        self.assertEqual(normalize_name("Naruto:\tChapter\n700"), "Naruto Chapter 700")

    def test_non_ascii_is_removed(self):
        self.assertEqual(normalize_name("Pokémon Adventures"), "Pokmon Adventures")

    def test_only_punctuation(self):
        self.assertEqual(normalize_name("?!#"), "")

    def test_idempotent(self):
        for name in ("  A - B  C ", "Naruto 42", "#00 : x", "", "Ça va?"):
            once = normalize_name(name)
            self.assertEqual(normalize_name(once), once)


class ExceptNamesTests(SimpleTestCase):
    def test_difference_keeps_discovery_order(self):
        self.assertEqual(
            except_names(["A", "B", "C", "D", "F", "G"], ["B", "C", "E"]),
            ["A", "D", "F", "G"],
        )

    def test_nothing_stored(self):
        self.assertEqual(except_names(["B", "A"], []), ["B", "A"])

    def test_comparison_trims_both_sides(self):
        self.assertEqual(except_names([" A ", "B"], ["A  ", " C"]), ["B"])

    def test_comparison_is_not_canonical(self):
        self.assertEqual(except_names(["One  Piece"], ["One Piece"]), ["One  Piece"])

    def test_duplicates_are_kept(self):
        self.assertEqual(except_names(["A", "A", "B"], ["B"]), ["A", "A"])


class ParseChapterNumberTests(SimpleTestCase):
    def test_prefix_is_removed(self):
        self.assertEqual(parse_chapter_number("Naruto", "Naruto 42"), 42)

    def test_names_are_normalized_first(self):
        self.assertEqual(parse_chapter_number("One Piece!", "One  Piece 1001"), 1001)

    def test_leading_zeros(self):
        self.assertEqual(parse_chapter_number("Bleach", "Bleach 007"), 7)

    def test_non_numeric_remainder(self):
        with self.assertRaises(InvalidChapterNumber):
            parse_chapter_number("Naruto", "Naruto Special")

    def test_missing_number(self):
        with self.assertRaises(InvalidChapterNumber):
            parse_chapter_number("Naruto", "Naruto")

    def test_trailing_text_is_rejected(self):
        with self.assertRaises(InvalidChapterNumber):
            parse_chapter_number("Naruto", "Naruto 42 v2")


class ShardingTests(SimpleTestCase):
    def test_fnv1a_32_reference_values(self):
        self.assertEqual(fnv1a_32(""), 0x811C9DC5)
        self.assertEqual(fnv1a_32("a"), 0xE40C292C)
        self.assertEqual(fnv1a_32("foobar"), 0xBF9CF968)

    def test_bucket_is_deterministic(self):
        identifier = "0f8fad5bd9cb469fa16570867728950e"
        bucket = shard_bucket(identifier, 100)
        self.assertEqual(bucket, fnv1a_32(identifier) % 100)
        self.assertEqual(shard_bucket(identifier, 100), bucket)
        self.assertTrue(0 <= bucket < 100)

    def test_storage_name(self):
        identifier = "0f8fad5bd9cb469fa16570867728950e"
        self.assertEqual(
            shard_storage_name(identifier, 100),
            f"{fnv1a_32(identifier) % 100}/{identifier}.jpg",
        )
        self.assertEqual(shard_storage_name("abc", 1, extension="png"), "0/abc.png")

    def test_ensure_shard_folders(self):
        storage_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, storage_root, ignore_errors=True)

        ensure_shard_folders(storage_root, 5)
        # Running again over existing folders is fine
        ensure_shard_folders(storage_root, 5)

        self.assertEqual(
            sorted(os.listdir(storage_root), key=int), ["0", "1", "2", "3", "4"]
        )
