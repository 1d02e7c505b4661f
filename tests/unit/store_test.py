import hashlib
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from ddt import ddt, data, unpack

from fredcache.errors import StoreError
from fredcache.store import FileStore, MemoryStore


KEY = b'series/observations?series_id=GNPCA&'
HASHED_KEY = hashlib.sha256(KEY).hexdigest()


@ddt
class TestFileStore(TestCase):
    @data(
        (0, Path(HASHED_KEY)),
        (2, Path(HASHED_KEY[0], HASHED_KEY[1], HASHED_KEY[2:])),
        (5, Path(*HASHED_KEY[:5], HASHED_KEY[5:])),
        # Levels are clamped.
        (-3, Path(HASHED_KEY)),
    )
    @unpack
    def test_put_writes_entry_file(self, levels, expected_path):
        with TemporaryDirectory() as directory:
            directory = Path(directory)

            store = FileStore(directory, levels)
            store.put(KEY, b'some contents')

            entry_path = directory / 'entries' / expected_path
            self.assertTrue(entry_path.exists(), 'The store should create the file for the entry')
            self.assertEqual(b'some contents', entry_path.read_bytes())
            self.assertEqual([], list((directory / 'tmp').iterdir()), 'No temporary files should be left behind')

    def test_get_after_put(self):
        with TemporaryDirectory() as directory:
            store = FileStore(directory)
            store.put(KEY, b'some contents')

            self.assertEqual(b'some contents', store.get(KEY))

    def test_get_survives_a_new_store_instance(self):
        with TemporaryDirectory() as directory:
            FileStore(directory).put(KEY, b'some contents')

            self.assertEqual(b'some contents', FileStore(directory).get(KEY))

    def test_get_miss(self):
        with TemporaryDirectory() as directory:
            self.assertIsNone(FileStore(directory).get(KEY))

    def test_put_replaces_existing_entry(self):
        with TemporaryDirectory() as directory:
            store = FileStore(directory)
            store.put(KEY, b'old')
            store.put(KEY, b'new')

            self.assertEqual(b'new', store.get(KEY))

    def test_delete(self):
        with TemporaryDirectory() as directory:
            store = FileStore(directory)
            store.put(KEY, b'some contents')
            store.delete(KEY)

            self.assertIsNone(store.get(KEY))
            # Deleting again is harmless.
            store.delete(KEY)

    def test_put_failure_raises_store_error(self):
        with TemporaryDirectory() as directory:
            directory = Path(directory)
            # A file where the entry directory should be makes every write fail.
            (directory / 'entries').write_bytes(b'')

            with self.assertRaises(StoreError):
                FileStore(directory).put(KEY, b'some contents')

    def test_unreadable_entry_raises_store_error(self):
        with TemporaryDirectory() as directory:
            store = FileStore(directory, 0)
            # A directory where the entry file should be cannot be read.
            (Path(directory) / 'entries' / HASHED_KEY).mkdir(parents=True)

            with self.assertRaises(StoreError):
                store.get(KEY)


class TestMemoryStore(TestCase):
    def test_put_get_delete(self):
        store = MemoryStore()
        self.assertIsNone(store.get(KEY))

        store.put(KEY, b'some contents')
        self.assertEqual(b'some contents', store.get(KEY))
        self.assertEqual(1, len(store))

        store.delete(KEY)
        self.assertIsNone(store.get(KEY))
        self.assertEqual(0, len(store))
