"""
Tests for the Puzzle Catalog

Loading, validation of malformed data, iteration order and lookups.
"""

import dataclasses
import json
import random
import unittest
from pathlib import Path

import pytest

from puzzle_verifier.catalog import PuzzleCatalog, load_catalog
from puzzle_verifier.errors import MalformedCatalog
from puzzle_verifier.puzzle_types import Bucket, PuzzleRecord

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "puzzles.json"


def _entry(puzzle_id, fen="7k/5Q2/7K/8/8/8/8/8 w - - 0 1", solution=("Qg7#",), **extra):
    return {"id": puzzle_id, "fen": fen, "solution": list(solution), **extra}


class TestLoadCatalog(unittest.TestCase):
    """Tests for the shipped catalog file."""

    def setUp(self):
        self.catalog = PuzzleCatalog.load(DATA_FILE)

    def test_bucket_sizes(self):
        self.assertEqual(len(self.catalog), 7)
        self.assertEqual(len(self.catalog.by_bucket(Bucket.BEGINNER)), 3)
        self.assertEqual(len(self.catalog.by_bucket("intermediate")), 2)
        self.assertEqual(len(self.catalog.by_bucket(Bucket.EXPERT)), 2)

    def test_iteration_order(self):
        """Buckets in beginner/intermediate/expert order, records in file order."""
        ids = [record.id for _bucket, record in self.catalog.iterate()]
        self.assertEqual(ids, ["b1", "b2", "b3", "i1", "i2", "e1", "e2"])

    def test_iteration_is_restartable(self):
        first = list(self.catalog.iterate())
        second = list(self.catalog.iterate())
        self.assertEqual(first, second)
        self.assertEqual(list(self.catalog), first)

    def test_bucket_matches_record(self):
        for bucket, record in self.catalog.iterate():
            self.assertEqual(record.bucket, bucket)

    def test_record_fields(self):
        record = self.catalog.get("i1")
        self.assertEqual(record.start, "7k/4Q3/5K2/8/8/8/8/8 w - - 0 1")
        self.assertEqual(record.solution, ("Qf8+", "Kh7", "Qg7#"))
        self.assertEqual(record.description, "Queen and king: mate in 2")

    def test_get_unknown_id(self):
        self.assertIsNone(self.catalog.get("nope"))

    def test_random_puzzle(self):
        record = self.catalog.random_puzzle(Bucket.EXPERT, rng=random.Random(7))
        self.assertIn(record, self.catalog.by_bucket(Bucket.EXPERT))

    def test_catalog_is_read_only(self):
        with self.assertRaises(TypeError):
            self.catalog.buckets[Bucket.BEGINNER] = ()
        record = self.catalog.get("b1")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.start = "8/8/8/8/8/8/8/8 w - - 0 1"


class TestPuzzleRecord(unittest.TestCase):

    def test_empty_solution_rejected(self):
        with self.assertRaises(ValueError):
            PuzzleRecord(id="x", bucket=Bucket.BEGINNER, start="8/8/8/8/8/8/8/8 w - - 0 1", solution=())

    def test_list_solution_frozen_to_tuple(self):
        record = PuzzleRecord(id="x", bucket="expert", start="fen", solution=["e4"])
        self.assertEqual(record.solution, ("e4",))
        self.assertEqual(record.bucket, Bucket.EXPERT)

    def test_to_dict_uses_file_field_names(self):
        record = PuzzleRecord(id="x", bucket=Bucket.BEGINNER, start="fen", solution=("e4",))
        data = record.to_dict()
        self.assertEqual(data["fen"], "fen")
        self.assertEqual(data["solution"], ["e4"])
        self.assertEqual(data["difficulty"], "beginner")


def test_missing_solution_is_fatal():
    data = {"beginner": [{"id": "b1", "fen": "7k/5Q2/7K/8/8/8/8/8 w - - 0 1"}]}
    with pytest.raises(MalformedCatalog) as exc:
        PuzzleCatalog.load(data)
    assert any("solution" in e for e in exc.value.errors)


def test_missing_fen_is_fatal():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load({"expert": [{"id": "e1", "solution": ["Qg7#"]}]})


def test_empty_solution_is_fatal():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load({"beginner": [_entry("b1", solution=())]})


def test_non_string_moves_are_fatal():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load({"beginner": [_entry("b1", solution=(1, 2))]})


def test_duplicate_ids_are_fatal():
    with pytest.raises(MalformedCatalog, match="Duplicate"):
        PuzzleCatalog.load({"beginner": [_entry("p1")], "expert": [_entry("p1")]})


def test_unknown_bucket_is_fatal():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load({"grandmaster": [_entry("g1")]})


def test_bucket_must_be_a_list():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load({"beginner": {"id": "b1"}})


def test_top_level_must_be_an_object():
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load("[]")


def test_invalid_json_is_fatal(tmp_path):
    path = tmp_path / "puzzles.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load(path)


def test_undecodable_file_is_fatal(tmp_path):
    path = tmp_path / "puzzles.json"
    path.write_bytes(b'{"beginner": [\xff\xfe]}')
    with pytest.raises(MalformedCatalog, match="Cannot read catalog"):
        PuzzleCatalog.load(path)


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(MalformedCatalog):
        PuzzleCatalog.load(tmp_path / "absent.json")


def test_missing_buckets_are_empty():
    catalog = PuzzleCatalog.load({"intermediate": [_entry("i1")]})
    assert len(catalog) == 1
    assert catalog.by_bucket(Bucket.BEGINNER) == ()
    assert catalog.random_puzzle(Bucket.EXPERT) is None


def test_extra_fields_accepted():
    entry = _entry(
        "b1",
        description="Lichess abc: Mate in 1",
        difficulty="beginner",
        estimatedSolveTime="30s",
        source={"dataset": "Lichess chess-puzzles", "puzzleId": "abc"},
    )
    catalog = PuzzleCatalog.load(json.dumps({"beginner": [entry]}))
    record = catalog.get("b1")
    assert record.description == "Lichess abc: Mate in 1"
    assert record.source["puzzleId"] == "abc"


def test_invalid_fen_is_not_a_catalog_error():
    """A bad start position fails its own record at verification time, not the load."""
    catalog = load_catalog({"beginner": [_entry("b1", fen="garbage")]})
    assert catalog.get("b1").start == "garbage"


def test_dump_and_reload(tmp_path):
    catalog = PuzzleCatalog.load(DATA_FILE)
    out = tmp_path / "copy.json"
    catalog.dump(out)
    reloaded = PuzzleCatalog.load(out)
    assert list(reloaded.iterate()) == list(catalog.iterate())
