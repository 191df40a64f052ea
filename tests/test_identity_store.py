#!/usr/bin/env python3
"""
Unit tests for username persistence and console rendering helpers.
"""

import json
import tempfile
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.utils.identity_store import IdentityStore
from client.utils.logger import format_time


class TestIdentityStore(unittest.TestCase):
    """Test cases for IdentityStore."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / 'identity.json'
        self.store = IdentityStore(self.path)

    def test_load_without_file(self):
        self.assertIsNone(self.store.load())

    def test_save_and_load(self):
        self.store.save("  Alice ")
        self.assertEqual(self.store.load(), "Alice")
        self.assertEqual(json.loads(self.path.read_text()), {"username": "Alice", "has_joined": True})

    def test_save_rejects_blank_name(self):
        with self.assertRaises(ValueError):
            self.store.save("   ")
        self.assertFalse(self.path.exists())

    def test_clear(self):
        self.store.save("Alice")
        self.store.clear()
        self.store.clear()
        self.assertIsNone(self.store.load())

    def test_corrupt_file_is_ignored(self):
        self.path.write_text("{broken")
        self.assertIsNone(self.store.load())

    def test_not_joined_is_ignored(self):
        self.path.write_text(json.dumps({"username": "Alice", "has_joined": False}))
        self.assertIsNone(self.store.load())


class TestFormatTime(unittest.TestCase):
    """Test cases for timestamp rendering."""

    def test_naive_timestamp(self):
        self.assertEqual(format_time("2024-05-01T09:05:00"), "09:05")

    def test_missing_timestamp(self):
        self.assertEqual(format_time(None), "--:--")

    def test_unparseable_timestamp(self):
        self.assertEqual(format_time("yesterday"), "yesterday")

    def test_aware_timestamp(self):
        rendered = format_time("2024-05-01T09:05:00+00:00")
        self.assertRegex(rendered, r"^\d{2}:\d{2}$")


if __name__ == '__main__':
    unittest.main()
