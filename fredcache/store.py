from abc import ABC, abstractmethod
import hashlib
import logging
import os
from pathlib import Path
import shutil
import tempfile
import threading
from typing import Dict, Optional, Union

from .errors import StoreError
from .util import clamp


logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """
    An abstraction of a persistent byte store.

    A store has a deliberately narrow scope: to remember a value under a key
    such that it can be recalled later. Deciding what to store and when an
    entry is stale is left to its users. Implementations must tolerate
    concurrent `get()` and `put()` calls from several threads.
    """

    @abstractmethod
    def get(self, key: bytes) -> Optional[bytes]:
        """
        Retrieve the value stored under `key`.

        @param key
          The key to look up, usually `RequestSpec.key`.
        @return
          The stored bytes, or `None` if there is no entry.
        @throws StoreError
          If an entry exists but cannot be read.
        """

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """
        Store `value` under `key`, replacing any existing entry.

        @throws StoreError
          If the value could not be written. The store must not be left with a
          partially written entry.
        """

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """
        Delete the entry for `key`, if there is one.
        """

    def close(self):
        """
        Close any resources associated with the store.
        """


class MemoryStore(CacheStore):
    """
    An in-process store. Useful for tests and short-lived programs.
    """

    def __init__(self) -> None:
        self.__entries: Dict[bytes, bytes] = {}
        self.__lock = threading.Lock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self.__lock:
            return self.__entries.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        with self.__lock:
            self.__entries[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        with self.__lock:
            self.__entries.pop(bytes(key), None)

    def __len__(self) -> int:
        with self.__lock:
            return len(self.__entries)


class FileStore(CacheStore):
    def __init__(self, directory: Union[str, os.PathLike], directory_levels: int = 2) -> None:
        """
        Initialize the file store.

        @param directory
          The path to the root directory of the store.
        @param directory_levels
          The number of subdirectory levels to use in the entry directory. This
          will be clamped to be between 0 and 20, respectively.
        """
        self.__directory = Path(directory)
        self.__entry_directory = self.__directory / 'entries'
        self.__temp_directory = self.__directory / 'tmp'
        self.__directory_levels = clamp(directory_levels, 0, 20)

    @property
    def directory(self) -> Path:
        return self.__directory

    def _get_path(self, key: bytes) -> Path:
        hashed = hashlib.sha256(key).hexdigest()
        return self.__entry_directory / self._split_path(hashed)

    def _split_path(self, path: str) -> Path:
        subdirectories = (list(path[:self.__directory_levels])
                          + [path[self.__directory_levels:]])
        return Path(*subdirectories)

    def get(self, key: bytes) -> Optional[bytes]:
        entry_path = self._get_path(key)
        try:
            with open(entry_path, 'rb') as f:
                value = f.read()
        except FileNotFoundError:
            logger.info('No entry file at {}.'.format(entry_path))
            return None
        except OSError as e:
            raise StoreError('Could not read {}: {}'.format(entry_path, e)) from e
        logger.info('Loaded {} bytes from {}.'.format(len(value), entry_path))
        return value

    def put(self, key: bytes, value: bytes) -> None:
        entry_path = self._get_path(key)
        temp_path = None
        try:
            # The temporary directory lives in the store so that the final move
            # stays on one file system and is atomic.
            self.__temp_directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(mode='wb', dir=self.__temp_directory, delete=False) as f:
                temp_path = Path(f.name)
                f.write(value)

            logger.info('Moving temporary file into {}.'.format(entry_path))
            entry_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(temp_path), str(entry_path))
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StoreError('Could not write {}: {}'.format(entry_path, e)) from e

    def delete(self, key: bytes) -> None:
        entry_path = self._get_path(key)
        try:
            logger.info('Deleting {}.'.format(entry_path))
            entry_path.unlink()
        except FileNotFoundError:
            logger.info('No entry file at {}. Nothing to delete.'.format(entry_path))
        except OSError as e:
            raise StoreError('Could not delete {}: {}'.format(entry_path, e)) from e
